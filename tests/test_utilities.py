"""
Tests for request-building helpers.
"""

import json
from unittest.mock import Mock

import pytest

from cloudformation_deploy.constants import TAG_STACK_BASE_NAME, TAG_STACK_NAME, TAG_VERSION
from cloudformation_deploy.utilities import (
    add_template_property_to_parameters,
    base_name_matches_stack_name,
    determine_stack_name,
    get_parameters,
    get_tags,
    once,
)


class TestDetermineStackName:
    """Test stack name construction."""

    def test_explicit_stack_name(self) -> None:
        """Update configurations name the stack directly."""
        assert determine_stack_name({"stack_name": "my-stack"}) == "my-stack"

    def test_base_name_and_deploy_id(self) -> None:
        """Deploy configurations join base name and deploy id."""
        config = {"base_name": "web", "deploy_id": 15}
        assert determine_stack_name(config) == "web-15"

    def test_invalid_characters_replaced(self) -> None:
        """Characters CloudFormation rejects become dashes."""
        config = {"base_name": "web_app", "deploy_id": "1.2.3"}
        assert determine_stack_name(config) == "web-app-1-2-3"


class TestBaseNameMatchesStackName:
    """Test base name prefix matching."""

    def test_dash_delimited_prefix_matches(self) -> None:
        assert base_name_matches_stack_name("web", "web-12")

    def test_prefix_without_dash_does_not_match(self) -> None:
        assert not base_name_matches_stack_name("web", "webx-12")

    def test_longer_base_name_still_matches_prefix(self) -> None:
        """Only a cheap pre-filter: the tag check is what confirms."""
        assert base_name_matches_stack_name("web", "web-api-12")


class TestParametersAndTags:
    """Test parameter and tag conversion."""

    def test_get_parameters(self) -> None:
        params = get_parameters({"parameters": {"InstanceType": "t3.micro"}})
        assert params == [
            {"ParameterKey": "InstanceType", "ParameterValue": "t3.micro"}
        ]

    def test_get_tags_for_deploy(self) -> None:
        """User tags come first, then the managed tags."""
        config = {
            "base_name": "web",
            "deploy_id": "7",
            "version": "2.0.0",
            "tags": {"Team": "ops"},
        }

        assert get_tags(config) == [
            {"Key": "Team", "Value": "ops"},
            {"Key": TAG_STACK_NAME, "Value": "web-7"},
            {"Key": TAG_STACK_BASE_NAME, "Value": "web"},
            {"Key": TAG_VERSION, "Value": "2.0.0"},
        ]

    def test_get_tags_for_update(self) -> None:
        """No base name tag without a base name."""
        tags = get_tags({"stack_name": "web-7", "tags": {}})
        assert tags == [{"Key": TAG_STACK_NAME, "Value": "web-7"}]


class TestAddTemplateProperty:
    """Test choosing between TemplateURL and TemplateBody."""

    def test_url(self) -> None:
        url = "https://s3.amazonaws.com/bucket/template.json"
        params = add_template_property_to_parameters({}, url)
        assert params == {"TemplateURL": url}

    def test_http_url(self) -> None:
        params = add_template_property_to_parameters({}, "http://example.com/t.json")
        assert "TemplateURL" in params

    def test_json_string(self) -> None:
        body = '{"Resources": {}}'
        params = add_template_property_to_parameters({}, body)
        assert params == {"TemplateBody": body}

    def test_string_mentioning_url_is_body(self) -> None:
        body = "Description: see https://example.com\nResources: {}"
        params = add_template_property_to_parameters({}, body)
        assert params == {"TemplateBody": body}

    def test_document_serialized(self) -> None:
        template = {"Resources": {"Topic": {"Type": "AWS::SNS::Topic"}}}
        params = add_template_property_to_parameters({"StackName": "s"}, template)
        assert params["StackName"] == "s"
        assert json.loads(params["TemplateBody"]) == template


class TestOnce:
    """Test the single-fire wrapper."""

    def test_only_first_call_reaches_function(self) -> None:
        callback = Mock(return_value="first")
        guarded = once(callback)

        assert guarded("a") == "first"
        assert guarded("b") == "first"

        callback.assert_called_once_with("a")

    def test_first_error_wins_over_late_success(self) -> None:
        """A duplicate resolution after an error is ignored."""
        callback = Mock()
        resolve = once(callback)
        error = RuntimeError("boom")

        resolve(error)
        resolve(None)

        callback.assert_called_once_with(error)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""
Command-line interface for CloudFormation Deploy.
"""

"""Approval Portal package.

Feature modules (approvals, forms, recap, users, settings, notifications)
each follow the same layering: model -> repository (Protocol + MySQL) ->
service -> thin Flask controller.
"""

"""HRMS reconciliation package.

Feature modules (attendance, leave, payroll, ...) each carry a domain model,
pure rules, a repository interface with its MySQL implementation, a service
and a thin Flask controller.
"""

"""
Payroll Modules.

Thin orchestration layers over the payroll kernel and engines.
The payroll module contains:
- Domain models (the nouns)
- Configuration schema (policy and settings)
- Master-data join (timesheet line -> assignment -> position/contract/project)
- Workflow (payroll-run state machine)
- Run service and persistence adapter

Actual calculation logic lives in ``payroll_engines``.
"""

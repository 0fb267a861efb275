"""StallSync staff operations package.

Feature modules (staff, holidays, attendance, payroll, activity) each follow the
same model / repository / service / controller split. ``realtime`` carries the
change hub and batched fan-out subscriptions the payroll board is built on.
"""

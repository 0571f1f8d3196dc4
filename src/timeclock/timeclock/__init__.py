"""timeclock package.

Attendance and leave management organized by feature modules (attendance,
policy, requests, users, reports, ...). Each feature keeps the same layering:
domain dataclasses, a repository Protocol with a MySQL implementation, a
service holding the use cases and a thin Flask controller.

The attendance rules themselves live in ``attendance.classifier`` and are pure
functions of a policy, a punch record and an explicit "as of" instant.
"""

"""
Communications Module

Bulk email announcements from administrators to students.

API Endpoints (admin):
- POST /admin/emails/bulk - Email every student in a batch, a program, or all students
"""

"""
Tasks module - Admin-assigned tasks for students, batches and programs.
"""

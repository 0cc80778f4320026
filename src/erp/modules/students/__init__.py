"""
Students Module

Student onboarding, section-wise profiles, document uploads and the
profile completion evaluator.

API Endpoints (student):
- POST /student/onboarding - Complete onboarding
- GET /student/onboarding - Onboarding status
- GET /student/profile - Profile with completion
- PUT /student/profile - Update profile sections
- GET /student/form-visibility - Visible sections for the student's batch
- POST /student/documents - Upload a document
- GET /student/documents - List documents
- DELETE /student/documents/{id} - Delete a document
- POST /student/passport-photo - Upload passport photo

API Endpoints (admin):
- GET /admin/students - List students with completion
- GET /admin/students/{id} - Student profile
- POST /admin/students/assign-batch - Move a student into a batch
- POST /admin/students/{id}/remove-batch - Remove a student from their batch
"""

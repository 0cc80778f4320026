"""
Batches Module

Groups students into cohorts by (program, intake_year). A batch is found
or created when a student completes onboarding, and carries the form
visibility settings that decide which profile sections its students see.

API Endpoints (admin):
- GET /admin/batches - List batches with student counts
- GET /admin/batches/{id} - Get batch
- PATCH /admin/batches/{id} - Update batch
- GET /admin/form-visibility - Visibility settings of active batches
- PUT /admin/form-visibility/{batch_id} - Replace a batch's visibility settings

Routers are imported from their modules directly (erp.api), so that
importing the models here does not pull in the student service.
"""

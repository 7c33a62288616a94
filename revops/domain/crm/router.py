"""CRM router - Admin endpoints for the CRM"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import AdminUser, require_admin
from ...database import get_db
from ...shared.schemas import success_response
from .schemas import (
    ActivityCreate,
    CompanyCreate,
    CompanyUpdate,
    ContactCreate,
    ContactUpdate,
    DealCreate,
    DealStageChange,
    DealUpdate,
    ProjectCreate,
    ProjectUpdate,
    TaskCreate,
    TaskUpdate,
)
from .service import (
    CRMService,
    contact_to_api,
    deal_to_api,
    project_to_api,
    task_to_api,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/crm", tags=["CRM"], dependencies=[Depends(require_admin)]
)


def get_crm_service(db: Session = Depends(get_db)) -> CRMService:
    """Dependency injection for CRMService"""
    return CRMService(db)


# ============================================================================
# COMPANIES
# ============================================================================


@router.get("/companies")
async def list_companies(
    status: Optional[str] = Query(None),
    industry: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    service: CRMService = Depends(get_crm_service),
):
    companies = service.list_companies(status, industry, search)
    return success_response(companies, meta={"count": len(companies)})


@router.post("/companies", status_code=201)
async def create_company(
    data: CompanyCreate,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    return success_response(service.create_company(data, admin))


@router.get("/companies/{company_id}")
async def get_company(
    company_id: str,
    relations: Optional[str] = Query(None),
    service: CRMService = Depends(get_crm_service),
):
    """Company, with contacts, deals, projects and recent activity when ``relations=true``"""
    return success_response(service.get_company_detail(company_id, relations == "true"))


@router.patch("/companies/{company_id}")
async def update_company(
    company_id: str,
    data: CompanyUpdate,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    return success_response(service.update_company(company_id, data, admin))


@router.delete("/companies/{company_id}")
async def archive_company(
    company_id: str,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    """Companies are archived, never hard deleted"""
    return success_response(service.archive_company(company_id, admin), message="Company archived")


# ============================================================================
# CONTACTS
# ============================================================================


@router.get("/contacts")
async def list_contacts(
    companyId: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    service: CRMService = Depends(get_crm_service),
):
    contacts = service.list_contacts(companyId, status, search)
    return success_response(contacts, meta={"count": len(contacts)})


@router.post("/contacts", status_code=201)
async def create_contact(
    data: ContactCreate,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    return success_response(service.create_contact(data, admin))


@router.get("/contacts/{contact_id}")
async def get_contact(contact_id: str, service: CRMService = Depends(get_crm_service)):
    return success_response(contact_to_api(service.get_contact(contact_id)))


@router.patch("/contacts/{contact_id}")
async def update_contact(
    contact_id: str,
    data: ContactUpdate,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    return success_response(service.update_contact(contact_id, data, admin))


@router.delete("/contacts/{contact_id}")
async def deactivate_contact(
    contact_id: str,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    return success_response(
        service.deactivate_contact(contact_id, admin), message="Contact deactivated"
    )


@router.post("/contacts/{contact_id}/primary")
async def set_primary_contact(
    contact_id: str,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    return success_response(
        service.set_primary_contact(contact_id, admin), message="Primary contact updated"
    )


# ============================================================================
# DEALS
# ============================================================================


@router.get("/deals")
async def list_deals(
    stage: Optional[str] = Query(None),
    companyId: Optional[str] = Query(None),
    contactId: Optional[str] = Query(None),
    groupByStage: Optional[str] = Query(None),
    service: CRMService = Depends(get_crm_service),
):
    deals = service.list_deals(stage, companyId, contactId, groupByStage == "true")
    if isinstance(deals, dict):
        return success_response(deals)
    return success_response(deals, meta={"count": len(deals)})


@router.get("/deals/pipeline")
async def get_pipeline_metrics(service: CRMService = Depends(get_crm_service)):
    """Pipeline totals over open deals"""
    return success_response(service.get_pipeline_metrics())


@router.post("/deals", status_code=201)
async def create_deal(
    data: DealCreate,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    return success_response(service.create_deal(data, admin))


@router.get("/deals/{deal_id}")
async def get_deal(deal_id: str, service: CRMService = Depends(get_crm_service)):
    return success_response(deal_to_api(service.get_deal(deal_id)))


@router.patch("/deals/{deal_id}")
async def update_deal(
    deal_id: str,
    data: DealUpdate,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    return success_response(service.update_deal(deal_id, data, admin))


@router.delete("/deals/{deal_id}")
async def delete_deal(
    deal_id: str,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    service.delete_deal(deal_id, admin)
    return success_response(message="Deal deleted")


@router.post("/deals/{deal_id}/stage")
async def move_deal_stage(
    deal_id: str,
    data: DealStageChange,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    return success_response(service.move_deal_to_stage(deal_id, data, admin))


# ============================================================================
# PROJECTS
# ============================================================================


@router.get("/projects")
async def list_projects(
    status: Optional[str] = Query(None),
    companyId: Optional[str] = Query(None),
    dealId: Optional[str] = Query(None),
    service: CRMService = Depends(get_crm_service),
):
    projects = service.list_projects(status, companyId, dealId)
    return success_response(projects, meta={"count": len(projects)})


@router.get("/projects/stats")
async def get_project_stats(service: CRMService = Depends(get_crm_service)):
    return success_response(service.get_project_stats())


@router.post("/projects", status_code=201)
async def create_project(
    data: ProjectCreate,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    return success_response(service.create_project(data, admin))


@router.get("/projects/{project_id}")
async def get_project(project_id: str, service: CRMService = Depends(get_crm_service)):
    return success_response(project_to_api(service.get_project(project_id)))


@router.patch("/projects/{project_id}")
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    return success_response(service.update_project(project_id, data, admin))


@router.delete("/projects/{project_id}")
async def delete_project(
    project_id: str,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    service.delete_project(project_id, admin)
    return success_response(message="Project deleted")


@router.post("/projects/{project_id}/recalculate-progress")
async def recalculate_project_progress(
    project_id: str, service: CRMService = Depends(get_crm_service)
):
    return success_response(service.recalculate_progress(project_id))


# ============================================================================
# TASKS
# ============================================================================


@router.get("/tasks")
async def list_tasks(
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    projectId: Optional[str] = Query(None),
    dealId: Optional[str] = Query(None),
    overdue: Optional[str] = Query(None),
    service: CRMService = Depends(get_crm_service),
):
    tasks = service.list_tasks(status, priority, projectId, dealId, overdue == "true")
    return success_response(tasks, meta={"count": len(tasks)})


@router.get("/tasks/stats")
async def get_task_stats(service: CRMService = Depends(get_crm_service)):
    return success_response(service.get_task_stats())


@router.post("/tasks", status_code=201)
async def create_task(
    data: TaskCreate,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    return success_response(service.create_task(data, admin))


@router.get("/tasks/{task_id}")
async def get_task(task_id: str, service: CRMService = Depends(get_crm_service)):
    return success_response(task_to_api(service.get_task(task_id)))


@router.patch("/tasks/{task_id}")
async def update_task(
    task_id: str,
    data: TaskUpdate,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    return success_response(service.update_task(task_id, data, admin))


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: str,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    service.delete_task(task_id, admin)
    return success_response(message="Task deleted")


@router.post("/tasks/{task_id}/complete")
async def complete_task(
    task_id: str,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    return success_response(service.complete_task(task_id, admin))


@router.post("/tasks/{task_id}/reopen")
async def reopen_task(
    task_id: str,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    return success_response(service.reopen_task(task_id, admin))


# ============================================================================
# ACTIVITIES
# ============================================================================


@router.get("/activities")
async def list_activities(
    companyId: Optional[str] = Query(None),
    contactId: Optional[str] = Query(None),
    dealId: Optional[str] = Query(None),
    projectId: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    limit: Optional[int] = Query(None),
    service: CRMService = Depends(get_crm_service),
):
    activities = service.list_activities(companyId, contactId, dealId, projectId, type, limit)
    return success_response(activities, meta={"count": len(activities)})


@router.post("/activities", status_code=201)
async def create_activity(
    data: ActivityCreate,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    return success_response(service.create_activity(data, admin))


@router.delete("/activities/{activity_id}")
async def delete_activity(
    activity_id: str,
    admin: AdminUser = Depends(require_admin),
    service: CRMService = Depends(get_crm_service),
):
    service.delete_activity(activity_id, admin)
    return success_response(message="Activity deleted")


# ============================================================================
# DASHBOARD
# ============================================================================


@router.get("/dashboard")
async def get_dashboard(service: CRMService = Depends(get_crm_service)):
    """Aggregated CRM metrics"""
    return success_response(service.get_dashboard())

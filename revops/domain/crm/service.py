"""CRM service - Business logic for the admin CRM"""

import logging
import math
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import AdminUser
from ...models import utcnow
from ...models_crm import Company, Contact, Deal, Project, Task
from ...shared.schemas import to_column_values, to_update_values
from .repository import (
    ActivityRepository,
    CompanyRepository,
    ContactRepository,
    DealRepository,
    ProjectRepository,
    TaskRepository,
)
from .schemas import (
    DEAL_STAGES,
    PROJECT_STATUSES,
    TASK_PRIORITIES,
    TASK_STATUSES,
    ActivityCreate,
    ActivityResponse,
    CompanyCreate,
    CompanyResponse,
    CompanyUpdate,
    ContactCreate,
    ContactResponse,
    ContactUpdate,
    DealCreate,
    DealResponse,
    DealStageChange,
    DealUpdate,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
)

logger = logging.getLogger(__name__)

DEFAULT_ACTIVITY_LIMIT = 50
MAX_ACTIVITY_LIMIT = 500
COMPANY_RECENT_ACTIVITIES = 10


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def company_to_api(company) -> dict:
    return CompanyResponse.model_validate(company).to_api()


def contact_to_api(contact) -> dict:
    return ContactResponse.model_validate(contact).to_api()


def deal_to_api(deal) -> dict:
    return DealResponse.model_validate(deal).to_api()


def project_to_api(project) -> dict:
    return ProjectResponse.model_validate(project).to_api()


def task_to_api(task) -> dict:
    return TaskResponse.model_validate(task).to_api()


def activity_to_api(activity) -> dict:
    return ActivityResponse.model_validate(activity).to_api()


class CRMService:
    """Service layer for companies, contacts, deals, projects, tasks and activities"""

    def __init__(self, db: Session):
        self.db = db
        self.companies = CompanyRepository()
        self.contacts = ContactRepository()
        self.deals = DealRepository()
        self.projects = ProjectRepository()
        self.tasks = TaskRepository()
        self.activities = ActivityRepository()

    # ------------------------------------------------------------------
    # Companies
    # ------------------------------------------------------------------

    def list_companies(self, status: Optional[str], industry: Optional[str], search: Optional[str]):
        return [company_to_api(c) for c in self.companies.get_companies(self.db, status, industry, search)]

    def get_company(self, company_id: str):
        company = self.companies.get_company_by_id(self.db, company_id)
        if not company:
            raise HTTPException(status_code=404, detail="Company not found")
        return company

    def get_company_detail(self, company_id: str, with_relations: bool) -> dict:
        company = self.get_company(company_id)
        data = company_to_api(company)
        if not with_relations:
            return data

        data["contacts"] = [contact_to_api(c) for c in self.contacts.get_active_for_company(self.db, company.id)]
        data["deals"] = [deal_to_api(d) for d in self.deals.get_for_company(self.db, company.id)]
        data["projects"] = [
            project_to_api(p) for p in self.projects.get_projects(self.db, company_id=company.id)
        ]
        data["activities"] = [
            activity_to_api(a)
            for a in self.activities.get_activities(
                self.db, company_id=company.id, limit=COMPANY_RECENT_ACTIVITIES
            )
        ]
        return data

    def create_company(self, data: CompanyCreate, admin: AdminUser) -> dict:
        company = self.companies.create_company(
            self.db, **to_column_values(data), created_by=admin.name, updated_by=admin.name
        )
        logger.info(f"✅ Company created: {company.name} by {admin.name}")
        return company_to_api(company)

    def update_company(self, company_id: str, data: CompanyUpdate, admin: AdminUser) -> dict:
        company = self.get_company(company_id)
        company = self.companies.update_company(
            self.db, company, **to_update_values(data, Company), updated_by=admin.name
        )
        return company_to_api(company)

    def archive_company(self, company_id: str, admin: AdminUser) -> dict:
        company = self.get_company(company_id)
        company = self.companies.update_company(
            self.db, company, status="archived", updated_by=admin.name
        )
        logger.info(f"📦 Company archived: {company.name} by {admin.name}")
        return company_to_api(company)

    # ------------------------------------------------------------------
    # Contacts
    # ------------------------------------------------------------------

    def list_contacts(self, company_id: Optional[str], status: Optional[str], search: Optional[str]):
        return [contact_to_api(c) for c in self.contacts.get_contacts(self.db, company_id, status, search)]

    def get_contact(self, contact_id: str):
        contact = self.contacts.get_contact_by_id(self.db, contact_id)
        if not contact:
            raise HTTPException(status_code=404, detail="Contact not found")
        return contact

    def create_contact(self, data: ContactCreate, admin: AdminUser) -> dict:
        if data.companyId:
            self.get_company(data.companyId)

        contact = self.contacts.create_contact(
            self.db, **to_column_values(data), created_by=admin.name, updated_by=admin.name
        )
        logger.info(f"✅ Contact created: {contact.email} by {admin.name}")
        return contact_to_api(contact)

    def update_contact(self, contact_id: str, data: ContactUpdate, admin: AdminUser) -> dict:
        contact = self.get_contact(contact_id)
        if data.companyId:
            self.get_company(data.companyId)

        contact = self.contacts.update_contact(
            self.db, contact, **to_update_values(data, Contact), updated_by=admin.name
        )
        return contact_to_api(contact)

    def deactivate_contact(self, contact_id: str, admin: AdminUser) -> dict:
        contact = self.get_contact(contact_id)
        contact = self.contacts.update_contact(
            self.db, contact, status="inactive", updated_by=admin.name
        )
        logger.info(f"🚫 Contact deactivated: {contact.email} by {admin.name}")
        return contact_to_api(contact)

    def set_primary_contact(self, contact_id: str, admin: AdminUser) -> dict:
        contact = self.get_contact(contact_id)
        if not contact.company_id:
            raise HTTPException(status_code=400, detail="Contact is not associated with a company")

        contact = self.contacts.set_primary(self.db, contact, updated_by=admin.name)
        return contact_to_api(contact)

    # ------------------------------------------------------------------
    # Deals
    # ------------------------------------------------------------------

    def list_deals(
        self,
        stage: Optional[str],
        company_id: Optional[str],
        contact_id: Optional[str],
        group_by_stage: bool,
    ):
        if stage and stage not in DEAL_STAGES:
            raise HTTPException(
                status_code=400, detail=f"Invalid stage. Must be one of: {', '.join(DEAL_STAGES)}"
            )

        deals = self.deals.get_deals(self.db, stage, company_id, contact_id)
        if not group_by_stage:
            return [deal_to_api(d) for d in deals]

        grouped: dict[str, list[dict]] = {s: [] for s in DEAL_STAGES}
        for deal in deals:
            if deal.stage in grouped:
                grouped[deal.stage].append(deal_to_api(deal))
        return grouped

    def get_deal(self, deal_id: str):
        deal = self.deals.get_deal_by_id(self.db, deal_id)
        if not deal:
            raise HTTPException(status_code=404, detail="Deal not found")
        return deal

    def create_deal(self, data: DealCreate, admin: AdminUser) -> dict:
        self.get_company(data.companyId)

        deal = self.deals.create_deal(
            self.db, **to_column_values(data), created_by=admin.name, updated_by=admin.name
        )
        logger.info(f"✅ Deal created: {deal.name} ({deal.stage}) by {admin.name}")
        return deal_to_api(deal)

    def update_deal(self, deal_id: str, data: DealUpdate, admin: AdminUser) -> dict:
        deal = self.get_deal(deal_id)
        if data.companyId:
            self.get_company(data.companyId)

        deal = self.deals.update_deal(
            self.db, deal, **to_update_values(data, Deal), updated_by=admin.name
        )
        return deal_to_api(deal)

    def delete_deal(self, deal_id: str, admin: AdminUser) -> None:
        deal = self.get_deal(deal_id)
        self.deals.delete_deal(self.db, deal)
        logger.info(f"🗑️ Deal deleted: {deal_id} by {admin.name}")

    def move_deal_to_stage(self, deal_id: str, data: DealStageChange, admin: AdminUser) -> dict:
        """Move a deal through the pipeline and log the change as an activity"""
        deal = self.get_deal(deal_id)
        old_stage = deal.stage

        updates = {"stage": data.stage, "updated_by": admin.name}
        if data.stage == "closed_won":
            updates.update(actual_close_date=utcnow(), probability=100)
        elif data.stage == "closed_lost":
            updates.update(actual_close_date=utcnow(), probability=0, loss_reason=data.lossReason)

        deal = self.deals.update_deal(self.db, deal, **updates)

        self.activities.create_activity(
            self.db,
            deal_id=deal.id,
            company_id=deal.company_id,
            type="stage_change",
            subject=f"Deal moved from {old_stage} to {deal.stage}",
            description=f"Deal stage changed from {old_stage} to {deal.stage}",
            extra_data={"from": old_stage, "to": deal.stage},
            created_by=admin.name,
        )
        logger.info(f"📈 Deal {deal.id} moved from {old_stage} to {deal.stage}")
        return deal_to_api(deal)

    def get_pipeline_metrics(self) -> dict:
        """Value and count per stage across deals that are still open"""
        metrics = {
            "totalValue": 0.0,
            "dealCountByStage": {s: 0 for s in DEAL_STAGES},
            "valueByStage": {s: 0.0 for s in DEAL_STAGES},
            "averageDealSize": 0.0,
        }

        deals = self.deals.get_open_deals(self.db)
        for deal in deals:
            value = deal.value or 0.0
            metrics["totalValue"] += value
            metrics["dealCountByStage"][deal.stage] = metrics["dealCountByStage"].get(deal.stage, 0) + 1
            metrics["valueByStage"][deal.stage] = metrics["valueByStage"].get(deal.stage, 0.0) + value

        if deals:
            metrics["averageDealSize"] = metrics["totalValue"] / len(deals)
        return metrics

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def list_projects(self, status: Optional[str], company_id: Optional[str], deal_id: Optional[str]):
        return [project_to_api(p) for p in self.projects.get_projects(self.db, status, company_id, deal_id)]

    def get_project(self, project_id: str):
        project = self.projects.get_project_by_id(self.db, project_id)
        if not project:
            raise HTTPException(status_code=404, detail="Project not found")
        return project

    def create_project(self, data: ProjectCreate, admin: AdminUser) -> dict:
        self.get_company(data.companyId)

        project = self.projects.create_project(
            self.db, **to_column_values(data), created_by=admin.name, updated_by=admin.name
        )
        logger.info(f"✅ Project created: {project.name} by {admin.name}")
        return project_to_api(project)

    def update_project(self, project_id: str, data: ProjectUpdate, admin: AdminUser) -> dict:
        project = self.get_project(project_id)
        if data.companyId:
            self.get_company(data.companyId)

        project = self.projects.update_project(
            self.db, project, **to_update_values(data, Project), updated_by=admin.name
        )
        return project_to_api(project)

    def delete_project(self, project_id: str, admin: AdminUser) -> None:
        project = self.get_project(project_id)
        self.projects.delete_project(self.db, project)
        logger.info(f"🗑️ Project deleted: {project_id} by {admin.name}")

    def recalculate_progress(self, project_id: str) -> dict:
        """Progress = share of the project's tasks that are completed; no tasks leaves it as is"""
        project = self.get_project(project_id)
        tasks = self.tasks.get_for_project(self.db, project.id)
        if tasks:
            completed = sum(1 for t in tasks if t.status == "completed")
            project = self.projects.set_progress(
                self.db, project, round_half_up(completed / len(tasks) * 100)
            )
        return project_to_api(project)

    def get_project_stats(self) -> dict:
        projects = self.projects.get_all(self.db)
        by_status = {s: 0 for s in PROJECT_STATUSES}
        for project in projects:
            by_status[project.status] = by_status.get(project.status, 0) + 1

        total_progress = sum(p.progress_percent or 0 for p in projects)
        return {
            "total": len(projects),
            "byStatus": by_status,
            "averageProgress": total_progress / len(projects) if projects else 0,
        }

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def list_tasks(
        self,
        status: Optional[str],
        priority: Optional[str],
        project_id: Optional[str],
        deal_id: Optional[str],
        overdue: bool,
    ):
        if overdue:
            tasks = self.tasks.get_overdue_tasks(self.db)
        else:
            tasks = self.tasks.get_tasks(self.db, status, priority, project_id, deal_id)
        return [task_to_api(t) for t in tasks]

    def get_task(self, task_id: str):
        task = self.tasks.get_task_by_id(self.db, task_id)
        if not task:
            raise HTTPException(status_code=404, detail="Task not found")
        return task

    def _refresh_project_progress(self, project_id: Optional[str]) -> None:
        if project_id and self.projects.get_project_by_id(self.db, project_id):
            self.recalculate_progress(project_id)

    def create_task(self, data: TaskCreate, admin: AdminUser) -> dict:
        if not data.title or not data.title.strip():
            raise HTTPException(status_code=400, detail="Task title is required")
        if data.projectId:
            self.get_project(data.projectId)

        task = self.tasks.create_task(
            self.db, **to_column_values(data), created_by=admin.name, updated_by=admin.name
        )
        logger.info(f"✅ Task created: {task.title} by {admin.name}")
        self._refresh_project_progress(task.project_id)
        return task_to_api(task)

    def update_task(self, task_id: str, data: TaskUpdate, admin: AdminUser) -> dict:
        task = self.get_task(task_id)
        if data.projectId:
            self.get_project(data.projectId)

        previous_project_id = task.project_id
        updates = to_update_values(data, Task)
        if updates.get("status") == "completed" and task.status != "completed":
            updates["completed_at"] = utcnow()

        task = self.tasks.update_task(self.db, task, **updates, updated_by=admin.name)
        self._refresh_project_progress(task.project_id)
        if previous_project_id != task.project_id:
            self._refresh_project_progress(previous_project_id)
        return task_to_api(task)

    def complete_task(self, task_id: str, admin: AdminUser) -> dict:
        task = self.get_task(task_id)
        task = self.tasks.set_completion(self.db, task, "completed", utcnow(), updated_by=admin.name)
        self._refresh_project_progress(task.project_id)
        return task_to_api(task)

    def reopen_task(self, task_id: str, admin: AdminUser) -> dict:
        task = self.get_task(task_id)
        task = self.tasks.set_completion(self.db, task, "todo", None, updated_by=admin.name)
        self._refresh_project_progress(task.project_id)
        return task_to_api(task)

    def delete_task(self, task_id: str, admin: AdminUser) -> None:
        task = self.get_task(task_id)
        project_id = task.project_id
        self.tasks.delete_task(self.db, task)
        logger.info(f"🗑️ Task deleted: {task_id} by {admin.name}")
        self._refresh_project_progress(project_id)

    def get_task_stats(self) -> dict:
        tasks = self.tasks.get_all(self.db)
        by_status = {s: 0 for s in TASK_STATUSES}
        by_priority = {p: 0 for p in TASK_PRIORITIES}
        for task in tasks:
            by_status[task.status] = by_status.get(task.status, 0) + 1
            by_priority[task.priority] = by_priority.get(task.priority, 0) + 1

        completed = by_status.get("completed", 0)
        return {
            "total": len(tasks),
            "byStatus": by_status,
            "byPriority": by_priority,
            "completionRate": completed / len(tasks) * 100 if tasks else 0,
            "overdueCount": len(self.tasks.get_overdue_tasks(self.db)),
        }

    # ------------------------------------------------------------------
    # Activities
    # ------------------------------------------------------------------

    def list_activities(
        self,
        company_id: Optional[str],
        contact_id: Optional[str],
        deal_id: Optional[str],
        project_id: Optional[str],
        activity_type: Optional[str],
        limit: Optional[int],
    ):
        resolved = min(limit, MAX_ACTIVITY_LIMIT) if limit and limit > 0 else DEFAULT_ACTIVITY_LIMIT
        activities = self.activities.get_activities(
            self.db, company_id, contact_id, deal_id, project_id, activity_type, resolved
        )
        return [activity_to_api(a) for a in activities]

    def create_activity(self, data: ActivityCreate, admin: AdminUser) -> dict:
        values = to_column_values(data, exclude={"metadata"})
        if data.metadata is not None:
            values["extra_data"] = data.metadata

        activity = self.activities.create_activity(self.db, **values, created_by=admin.name)
        logger.info(f"📝 Activity logged: {activity.type} '{activity.subject}' by {admin.name}")
        return activity_to_api(activity)

    def delete_activity(self, activity_id: str, admin: AdminUser) -> None:
        activity = self.activities.get_activity_by_id(self.db, activity_id)
        if not activity:
            raise HTTPException(status_code=404, detail="Activity not found")
        self.activities.delete_activity(self.db, activity)
        logger.info(f"🗑️ Activity deleted: {activity_id} by {admin.name}")

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def get_dashboard(self) -> dict:
        pipeline = self.get_pipeline_metrics()
        project_stats = self.get_project_stats()
        task_stats = self.get_task_stats()

        return {
            "companies": {"total": self.companies.count_active(self.db)},
            "pipeline": {
                "totalValue": pipeline["totalValue"],
                "dealCount": sum(pipeline["dealCountByStage"].values()),
                "averageDealSize": pipeline["averageDealSize"],
                "byStage": pipeline["dealCountByStage"],
            },
            "projects": {
                "total": project_stats["total"],
                "byStatus": project_stats["byStatus"],
                "averageProgress": round_half_up(project_stats["averageProgress"]),
            },
            "tasks": {
                "total": task_stats["total"],
                "overdue": task_stats["overdueCount"],
                "completionRate": round_half_up(task_stats["completionRate"]),
                "byStatus": task_stats["byStatus"],
                "byPriority": task_stats["byPriority"],
            },
        }

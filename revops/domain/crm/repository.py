"""CRM repository - Database operations for the CRM entities"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import utcnow
from ...models_crm import Activity, Company, Contact, Deal, Project, Task
from .schemas import CLOSED_DEAL_STAGES


def _apply_updates(db: Session, record, updates: dict):
    for key, value in updates.items():
        if hasattr(record, key):
            setattr(record, key, value)

    db.commit()
    db.refresh(record)
    return record


def _create(db: Session, model, data: dict):
    record = model(**data)
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


class CompanyRepository:
    @staticmethod
    def get_companies(
        db: Session,
        status: Optional[str] = None,
        industry: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Company]:
        query = db.query(Company)
        if status:
            query = query.filter(Company.status == status)
        if industry:
            query = query.filter(Company.industry == industry)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Company.name.ilike(pattern), Company.website.ilike(pattern)))
        return query.order_by(Company.name).all()

    @staticmethod
    def count_active(db: Session) -> int:
        return db.query(Company).filter(Company.status == "active").count()

    @staticmethod
    def get_company_by_id(db: Session, company_id: str) -> Optional[Company]:
        return db.query(Company).filter(Company.id == company_id).first()

    @staticmethod
    def create_company(db: Session, **data) -> Company:
        return _create(db, Company, data)

    @staticmethod
    def update_company(db: Session, company: Company, **updates) -> Company:
        return _apply_updates(db, company, updates)


class ContactRepository:
    @staticmethod
    def get_contacts(
        db: Session,
        company_id: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Contact]:
        query = db.query(Contact)
        if company_id:
            query = query.filter(Contact.company_id == company_id)
        if status:
            query = query.filter(Contact.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Contact.first_name.ilike(pattern),
                    Contact.last_name.ilike(pattern),
                    Contact.email.ilike(pattern),
                )
            )
        return query.order_by(Contact.last_name, Contact.first_name).all()

    @staticmethod
    def get_active_for_company(db: Session, company_id: str) -> list[Contact]:
        """Primary contact first"""
        return (
            db.query(Contact)
            .filter(Contact.company_id == company_id, Contact.status == "active")
            .order_by(Contact.is_primary.desc(), Contact.first_name)
            .all()
        )

    @staticmethod
    def get_contact_by_id(db: Session, contact_id: str) -> Optional[Contact]:
        return db.query(Contact).filter(Contact.id == contact_id).first()

    @staticmethod
    def create_contact(db: Session, **data) -> Contact:
        return _create(db, Contact, data)

    @staticmethod
    def update_contact(db: Session, contact: Contact, **updates) -> Contact:
        return _apply_updates(db, contact, updates)

    @staticmethod
    def set_primary(db: Session, contact: Contact, updated_by: Optional[str] = None) -> Contact:
        """Make ``contact`` the only primary contact of its company"""
        db.query(Contact).filter(
            Contact.company_id == contact.company_id, Contact.id != contact.id
        ).update({"is_primary": False}, synchronize_session=False)
        contact.is_primary = True
        contact.updated_by = updated_by
        db.commit()
        db.refresh(contact)
        return contact


class DealRepository:
    @staticmethod
    def get_deals(
        db: Session,
        stage: Optional[str] = None,
        company_id: Optional[str] = None,
        contact_id: Optional[str] = None,
    ) -> list[Deal]:
        query = db.query(Deal)
        if stage:
            query = query.filter(Deal.stage == stage)
        if company_id:
            query = query.filter(Deal.company_id == company_id)
        if contact_id:
            query = query.filter(Deal.contact_id == contact_id)
        return query.order_by(Deal.stage, Deal.expected_close_date, Deal.created_at.desc()).all()

    @staticmethod
    def get_for_company(db: Session, company_id: str) -> list[Deal]:
        return (
            db.query(Deal).filter(Deal.company_id == company_id).order_by(Deal.created_at.desc()).all()
        )

    @staticmethod
    def get_open_deals(db: Session) -> list[Deal]:
        return db.query(Deal).filter(Deal.stage.notin_(CLOSED_DEAL_STAGES)).all()

    @staticmethod
    def get_deal_by_id(db: Session, deal_id: str) -> Optional[Deal]:
        return db.query(Deal).filter(Deal.id == deal_id).first()

    @staticmethod
    def create_deal(db: Session, **data) -> Deal:
        return _create(db, Deal, data)

    @staticmethod
    def update_deal(db: Session, deal: Deal, **updates) -> Deal:
        return _apply_updates(db, deal, updates)

    @staticmethod
    def delete_deal(db: Session, deal: Deal) -> None:
        """Hard delete; projects, tasks and activities keep existing without the link"""
        for model in (Project, Task, Activity):
            db.query(model).filter(model.deal_id == deal.id).update(
                {"deal_id": None}, synchronize_session=False
            )
        db.delete(deal)
        db.commit()


class ProjectRepository:
    @staticmethod
    def get_projects(
        db: Session,
        status: Optional[str] = None,
        company_id: Optional[str] = None,
        deal_id: Optional[str] = None,
    ) -> list[Project]:
        query = db.query(Project)
        if status:
            query = query.filter(Project.status == status)
        if company_id:
            query = query.filter(Project.company_id == company_id)
        if deal_id:
            query = query.filter(Project.deal_id == deal_id)
        return query.order_by(Project.created_at.desc()).all()

    @staticmethod
    def get_all(db: Session) -> list[Project]:
        return db.query(Project).all()

    @staticmethod
    def get_project_by_id(db: Session, project_id: str) -> Optional[Project]:
        return db.query(Project).filter(Project.id == project_id).first()

    @staticmethod
    def create_project(db: Session, **data) -> Project:
        return _create(db, Project, data)

    @staticmethod
    def update_project(db: Session, project: Project, **updates) -> Project:
        return _apply_updates(db, project, updates)

    @staticmethod
    def set_progress(db: Session, project: Project, progress_percent: int) -> Project:
        project.progress_percent = min(100, max(0, progress_percent))
        db.commit()
        db.refresh(project)
        return project

    @staticmethod
    def delete_project(db: Session, project: Project) -> None:
        """Hard delete; tasks and activities are detached from the project"""
        for model in (Task, Activity):
            db.query(model).filter(model.project_id == project.id).update(
                {"project_id": None}, synchronize_session=False
            )
        db.delete(project)
        db.commit()


class TaskRepository:
    @staticmethod
    def get_tasks(
        db: Session,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        project_id: Optional[str] = None,
        deal_id: Optional[str] = None,
    ) -> list[Task]:
        query = db.query(Task)
        if status:
            query = query.filter(Task.status == status)
        if priority:
            query = query.filter(Task.priority == priority)
        if project_id:
            query = query.filter(Task.project_id == project_id)
        if deal_id:
            query = query.filter(Task.deal_id == deal_id)
        # Due date ascending with undated tasks last
        return query.order_by(Task.due_date.is_(None), Task.due_date, Task.created_at).all()

    @staticmethod
    def get_overdue_tasks(db: Session) -> list[Task]:
        return (
            db.query(Task)
            .filter(
                Task.status.notin_(("completed", "cancelled")),
                Task.due_date.isnot(None),
                Task.due_date < utcnow(),
            )
            .order_by(Task.due_date)
            .all()
        )

    @staticmethod
    def get_all(db: Session) -> list[Task]:
        return db.query(Task).all()

    @staticmethod
    def get_for_project(db: Session, project_id: str) -> list[Task]:
        return db.query(Task).filter(Task.project_id == project_id).all()

    @staticmethod
    def get_task_by_id(db: Session, task_id: str) -> Optional[Task]:
        return db.query(Task).filter(Task.id == task_id).first()

    @staticmethod
    def create_task(db: Session, **data) -> Task:
        return _create(db, Task, data)

    @staticmethod
    def update_task(db: Session, task: Task, **updates) -> Task:
        return _apply_updates(db, task, updates)

    @staticmethod
    def set_completion(
        db: Session, task: Task, status: str, completed_at, updated_by: Optional[str] = None
    ) -> Task:
        task.status = status
        task.completed_at = completed_at
        task.updated_by = updated_by
        db.commit()
        db.refresh(task)
        return task

    @staticmethod
    def delete_task(db: Session, task: Task) -> None:
        db.delete(task)
        db.commit()


class ActivityRepository:
    @staticmethod
    def get_activities(
        db: Session,
        company_id: Optional[str] = None,
        contact_id: Optional[str] = None,
        deal_id: Optional[str] = None,
        project_id: Optional[str] = None,
        activity_type: Optional[str] = None,
        limit: int = 50,
    ) -> list[Activity]:
        query = db.query(Activity)
        if company_id:
            query = query.filter(Activity.company_id == company_id)
        if contact_id:
            query = query.filter(Activity.contact_id == contact_id)
        if deal_id:
            query = query.filter(Activity.deal_id == deal_id)
        if project_id:
            query = query.filter(Activity.project_id == project_id)
        if activity_type:
            query = query.filter(Activity.type == activity_type)
        return query.order_by(Activity.activity_date.desc()).limit(limit).all()

    @staticmethod
    def get_activity_by_id(db: Session, activity_id: str) -> Optional[Activity]:
        return db.query(Activity).filter(Activity.id == activity_id).first()

    @staticmethod
    def create_activity(db: Session, **data) -> Activity:
        return _create(db, Activity, data)

    @staticmethod
    def delete_activity(db: Session, activity: Activity) -> None:
        db.delete(activity)
        db.commit()

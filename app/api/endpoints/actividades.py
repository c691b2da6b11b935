# api/endpoints/actividades.py

from fastapi import APIRouter, Depends, status

from app.database import get_store
from app.schemas.request import OperationResult
from app.schemas.task import TaskCreate, TaskRead, TaskUpdate
from app.services import task_service
from app.services.record_store import RecordStore

router = APIRouter()

@router.post("/add", status_code=status.HTTP_201_CREATED)
def add_task(task_in: TaskCreate, store: RecordStore = Depends(get_store)):
    task = task_service.create_task(store, task_in)
    return {
        "success": True,
        "message": "Tarea Kanban agregada.",
        "data": TaskRead.model_validate(task),
    }

@router.put("/update-status")
def update_task(task_in: TaskUpdate, store: RecordStore = Depends(get_store)):
    task = task_service.update_task(store, task_in)
    return {
        "success": True,
        "message": "Tarea Kanban actualizada.",
        "data": TaskRead.model_validate(task),
    }

@router.delete("/{task_id}", response_model=OperationResult)
def delete_task(task_id: int, store: RecordStore = Depends(get_store)):
    task_service.delete_task(store, task_id)
    return OperationResult(message="Tarea Kanban eliminada.")

# api/endpoints/sprints.py

from fastapi import APIRouter, Depends, status
from typing import List

from app.database import get_store
from app.schemas.request import OperationResult
from app.schemas.sprint import SprintCreate, SprintRead, SprintUpdate, SprintWithCount
from app.services import sprint_service
from app.services.record_store import RecordStore

router = APIRouter()

@router.get("/", response_model=List[SprintWithCount])
def list_sprints(store: RecordStore = Depends(get_store)):
    return sprint_service.list_sprints(store)

@router.get("/active", response_model=SprintRead)
def get_active_sprint(store: RecordStore = Depends(get_store)):
    return sprint_service.get_active_sprint(store)

@router.get("/{sprint_id}", response_model=SprintRead)
def get_sprint(sprint_id: int, store: RecordStore = Depends(get_store)):
    return sprint_service.get_sprint(store, sprint_id)

@router.post("/", response_model=SprintRead, status_code=status.HTTP_201_CREATED)
def create_sprint(sprint_in: SprintCreate, store: RecordStore = Depends(get_store)):
    return sprint_service.create_sprint(store, sprint_in)

@router.put("/{sprint_id}", response_model=SprintRead)
def update_sprint(sprint_id: int, sprint_in: SprintUpdate, store: RecordStore = Depends(get_store)):
    return sprint_service.update_sprint(store, sprint_id, sprint_in)

@router.delete("/{sprint_id}", response_model=OperationResult)
def delete_sprint(sprint_id: int, store: RecordStore = Depends(get_store)):
    sprint_service.delete_sprint(store, sprint_id)
    return OperationResult(message="Sprint eliminado.")

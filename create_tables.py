# create_tables.py
from sqlmodel import SQLModel
from app.database import engine
import app.models.request
import app.models.sprint
import app.models.task



def create_db_and_tables():
    SQLModel.metadata.create_all(engine)

if __name__ == "__main__":
    create_db_and_tables()

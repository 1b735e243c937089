"""Task service - storage logic for the tasks of a goal."""
from datetime import datetime
from typing import Optional

from pymongo import ASCENDING

from triumph_board.database import GOALS, TASKS
from triumph_board.events import ChangeNotifier
from triumph_board.models.task import Task, TaskCreate
from triumph_board.services.documents import convert_documents
from triumph_board.services.ordering import next_display_order
from triumph_board.utils.ids import new_entity_id


class TaskService:
    """Service for handling task operations."""

    def __init__(self, db, notifier: Optional[ChangeNotifier] = None):
        """Initialize service with database connection."""
        self.db = db
        self.tasks = db[TASKS]
        self.goals = db[GOALS]
        self.notifier = notifier or ChangeNotifier()

    def _doc_to_task(self, doc: dict) -> Task:
        """Convert database document to Task model."""
        return Task(
            _id=str(doc["_id"]),
            goal_id=doc["goal_id"],
            text=doc["text"],
            due_date=doc.get("due_date"),
            priority=doc.get("priority") or "Medium",
            is_completed=doc.get("is_completed", False),
            date_created=doc["date_created"],
            display_order=doc.get("display_order", 0),
        )

    async def create_task(
        self,
        goal_id: str,
        task_create: TaskCreate,
        session=None,
    ) -> Task:
        """
        Create a new task at the end of a goal's task list.

        Args:
            goal_id: ID of the owning goal
            task_create: Task creation data
            session: Optional client session when part of a larger write

        Returns:
            Created task object

        Raises:
            ValueError: If the goal doesn't exist
        """
        goal = await self.goals.find_one({"_id": goal_id}, {"_id": 1}, session=session)
        if not goal:
            raise ValueError("Goal not found")

        task_doc = {
            "_id": new_entity_id(),
            "goal_id": goal_id,
            "text": task_create.text,
            "due_date": task_create.due_date,
            "priority": task_create.priority.value,
            "is_completed": False,
            "date_created": datetime.utcnow(),
            "display_order": await next_display_order(
                self.tasks,
                scope={"goal_id": goal_id},
                session=session,
            ),
        }

        await self.tasks.insert_one(task_doc, session=session)

        if session is None:
            await self.notifier.created(TASKS, task_doc["_id"])

        return self._doc_to_task(task_doc)

    async def list_tasks(self, goal_id: str) -> list[Task]:
        """List a goal's tasks by display order, then creation date."""
        cursor = self.tasks.find({"goal_id": goal_id}).sort(
            [("display_order", ASCENDING), ("date_created", ASCENDING)]
        )
        task_docs = await cursor.to_list(length=None)

        return convert_documents(task_docs, self._doc_to_task, "task")

    async def set_completed(self, task_id: str, is_completed: bool) -> Task:
        """
        Mark a task completed or open.

        Raises:
            ValueError: If task not found
        """
        updated_doc = await self.tasks.find_one_and_update(
            {"_id": task_id},
            {"$set": {"is_completed": is_completed}},
            return_document=True,
        )

        if not updated_doc:
            raise ValueError("Task not found")

        await self.notifier.updated(TASKS, task_id)

        return self._doc_to_task(updated_doc)

    async def toggle_completion(self, task_id: str) -> Task:
        """
        Flip a task's completion flag in the store.

        Raises:
            ValueError: If task not found
        """
        updated_doc = await self.tasks.find_one_and_update(
            {"_id": task_id},
            [{"$set": {"is_completed": {"$not": [{"$ifNull": ["$is_completed", False]}]}}}],
            return_document=True,
        )

        if not updated_doc:
            raise ValueError("Task not found")

        await self.notifier.updated(TASKS, task_id)

        return self._doc_to_task(updated_doc)

    async def delete_task(self, task_id: str) -> None:
        """
        Delete a single task.

        Raises:
            ValueError: If task not found
        """
        result = await self.tasks.delete_one({"_id": task_id})

        if result.deleted_count == 0:
            raise ValueError("Task not found")

        await self.notifier.deleted(TASKS, task_id)

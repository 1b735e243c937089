"""Goal service - storage logic for triumph goals and their task lists."""
from datetime import datetime
from typing import Optional

from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from triumph_board.database import GOALS, TASKS
from triumph_board.events import ChangeNotifier
from triumph_board.models.goal import Goal, GoalCreate, GoalProgress, GoalUpdate
from triumph_board.services.documents import convert_documents
from triumph_board.services.ordering import next_display_order
from triumph_board.utils.ids import new_entity_id


class GoalService:
    """Service for handling goal operations."""

    def __init__(self, db, notifier: Optional[ChangeNotifier] = None):
        """Initialize service with database connection."""
        self.db = db
        self.goals = db[GOALS]
        self.tasks = db[TASKS]
        self.notifier = notifier or ChangeNotifier()

    def _doc_to_goal(self, doc: dict) -> Goal:
        """Convert database document to Goal model."""
        return Goal(
            _id=str(doc["_id"]),
            name=doc["name"],
            description=doc.get("description"),
            date_created=doc["date_created"],
            display_order=doc.get("display_order", 0),
        )

    async def create_goal(
        self,
        goal_create: GoalCreate,
        session=None,
    ) -> Goal:
        """
        Create a new goal at the end of the list.

        Args:
            goal_create: Goal creation data
            session: Optional client session when part of a larger write

        Returns:
            Created goal object
        """
        goal_doc = {
            "_id": new_entity_id(),
            "name": goal_create.name,
            "description": goal_create.description,
            "date_created": datetime.utcnow(),
            "display_order": await next_display_order(self.goals, session=session),
        }

        await self.goals.insert_one(goal_doc, session=session)

        # Emitted by the caller once the surrounding transaction commits
        if session is None:
            await self.notifier.created(GOALS, goal_doc["_id"])

        return self._doc_to_goal(goal_doc)

    async def list_goals(self) -> list[Goal]:
        """List goals in display order."""
        cursor = self.goals.find({}).sort("display_order", ASCENDING)
        goal_docs = await cursor.to_list(length=None)

        return convert_documents(goal_docs, self._doc_to_goal, "goal")

    async def get_goal(self, goal_id: str, session=None) -> Goal:
        """
        Get a single goal by ID.

        Raises:
            ValueError: If goal not found
        """
        goal_doc = await self.goals.find_one({"_id": goal_id}, session=session)

        if not goal_doc:
            raise ValueError("Goal not found")

        return self._doc_to_goal(goal_doc)

    async def update_goal(
        self,
        goal_id: str,
        goal_update: GoalUpdate,
    ) -> Goal:
        """
        Update a goal's name or description.

        Args:
            goal_id: Goal ID
            goal_update: Update data; a blank description clears it

        Returns:
            Updated goal

        Raises:
            ValueError: If goal not found
        """
        update_doc = {}
        if goal_update.name is not None:
            update_doc["name"] = goal_update.name
        if goal_update.description is not None:
            update_doc["description"] = goal_update.description.strip() or None

        if not update_doc:
            return await self.get_goal(goal_id)

        updated_doc = await self.goals.find_one_and_update(
            {"_id": goal_id},
            {"$set": update_doc},
            return_document=True,
        )

        if not updated_doc:
            raise ValueError("Goal not found")

        await self.notifier.updated(GOALS, goal_id)

        return self._doc_to_goal(updated_doc)

    async def delete_goal(self, goal_id: str) -> list[str]:
        """
        Delete a goal together with every task it owns.

        Tasks are removed first, then the goal. With a transaction both writes
        commit together; without one, a failed write puts the deleted tasks
        back before the error is raised.

        Args:
            goal_id: Goal ID

        Returns:
            IDs of the deleted tasks

        Raises:
            ValueError: If goal not found
        """
        async with self.db.transaction() as session:
            existing = await self.goals.find_one({"_id": goal_id}, session=session)
            if not existing:
                raise ValueError("Goal not found")

            cursor = self.tasks.find({"goal_id": goal_id}, session=session)
            task_docs = await cursor.to_list(length=None)
            task_ids = [str(doc["_id"]) for doc in task_docs]

            try:
                await self.tasks.delete_many({"goal_id": goal_id}, session=session)
                await self.goals.delete_one({"_id": goal_id}, session=session)
            except PyMongoError:
                if session is None:
                    await self._restore_tasks(task_docs)
                raise

        for task_id in task_ids:
            await self.notifier.deleted(TASKS, task_id)
        await self.notifier.deleted(GOALS, goal_id)

        return task_ids

    async def _restore_tasks(self, task_docs: list[dict]) -> None:
        """Write back task documents removed by an interrupted cascade."""
        for doc in task_docs:
            await self.tasks.replace_one({"_id": doc["_id"]}, doc, upsert=True)

    async def get_progress(self, goal_id: str) -> GoalProgress:
        """Count completed and total tasks of a goal."""
        total = await self.tasks.count_documents({"goal_id": goal_id})
        completed = await self.tasks.count_documents({"goal_id": goal_id, "is_completed": True})

        return GoalProgress(goal_id=goal_id, completed=completed, total=total)

"""
Persistence controller - the single entry point the dashboard uses to read
and change stored entities.

Every write goes through here. Input is validated before the store is
touched; store failures are logged and reported as ``None`` / ``False``
instead of being raised, and reads that fail come back empty.
"""
import logging
from datetime import datetime
from typing import Awaitable, Iterable, Optional, TypeVar, Union

from pydantic import BaseModel
from pymongo.errors import PyMongoError

from triumph_board.database import GOALS, TASKS
from triumph_board.events import ChangeNotifier
from triumph_board.models.goal import Goal, GoalCreate, GoalProgress, GoalUpdate
from triumph_board.models.knowledge_snippet import (
    KnowledgeSnippet,
    KnowledgeSnippetCreate,
    KnowledgeSnippetUpdate,
)
from triumph_board.models.quick_link import QuickLink, QuickLinkCreate
from triumph_board.models.task import Task, TaskCreate, TaskPriority
from triumph_board.models.widget_config import WidgetConfig, WidgetConfigCreate, WidgetType
from triumph_board.services.goal_service import GoalService
from triumph_board.services.knowledge_snippet_service import KnowledgeSnippetService
from triumph_board.services.quick_link_service import QuickLinkService
from triumph_board.services.task_service import TaskService
from triumph_board.services.widget_service import WidgetConfigService

logger = logging.getLogger(__name__)

T = TypeVar("T")

EntityRef = Union[BaseModel, str]


def _id_of(entity: EntityRef) -> str:
    """Accept either an entity model or its ID."""
    if isinstance(entity, str):
        return entity
    return entity.id


class PersistenceController:
    """
    Data access facade over the entity services.

    Constructed with an explicit store handle and passed to whoever needs
    it. Mutations are expected from one writer at a time.

    The services bind their collections on construction, so call
    ``Database.connect()`` before building the controller (otherwise
    StoreNotConnectedError is raised) and build a new controller after a
    reconnect.
    """

    def __init__(self, database, notifier: Optional[ChangeNotifier] = None):
        self.database = database
        self.notifier = notifier or ChangeNotifier()
        self.quick_links = QuickLinkService(database, self.notifier)
        self.goals = GoalService(database, self.notifier)
        self.tasks = TaskService(database, self.notifier)
        self.snippets = KnowledgeSnippetService(database, self.notifier)
        self.widgets = WidgetConfigService(database, self.notifier)

    async def _persist(self, operation: str, write: Awaitable[T]) -> Optional[T]:
        """Run a write; log and swallow store errors and missing targets."""
        try:
            return await write
        except PyMongoError as e:
            logger.error(f"Error saving {operation}: {e}")
        except ValueError as e:
            logger.warning(f"Could not {operation}: {e}")
        return None

    async def _fetch(self, operation: str, read: Awaitable[T], default: T) -> T:
        """Run a read; log store errors and substitute ``default``."""
        try:
            return await read
        except PyMongoError as e:
            logger.error(f"Error fetching {operation}: {e}")
        except ValueError as e:
            logger.warning(f"Could not fetch {operation}: {e}")
        return default

    # Quick links

    async def create_quick_link(self, title: str, url: str) -> Optional[QuickLink]:
        """
        Add a quick link at the end of the list.

        Raises:
            pydantic.ValidationError: If the title is blank or the URL invalid
        """
        link_create = QuickLinkCreate(title=title, url=url)
        return await self._persist(
            "quick link",
            self.quick_links.create_quick_link(link_create),
        )

    async def list_quick_links(self) -> list[QuickLink]:
        return await self._fetch("quick links", self.quick_links.list_quick_links(), [])

    async def delete_quick_link(self, link: EntityRef) -> bool:
        result = await self._persist(
            "delete quick link",
            self._deleted(self.quick_links.delete_quick_link(_id_of(link))),
        )
        return bool(result)

    # Goals and tasks

    async def create_goal(self, name: str, description: Optional[str] = None) -> Optional[Goal]:
        """
        Add a goal at the end of the list.

        The returned goal can be handed straight to create_task.

        Raises:
            pydantic.ValidationError: If the name is blank
        """
        goal_create = GoalCreate(name=name, description=description)
        return await self._persist("goal", self.goals.create_goal(goal_create))

    async def create_goal_with_tasks(
        self,
        name: str,
        tasks: Iterable[TaskCreate] = (),
        description: Optional[str] = None,
    ) -> Optional[tuple[Goal, list[Task]]]:
        """
        Create a goal and its initial tasks in one write.

        Either everything is stored or nothing is. Without transactions a
        goal whose tasks fail part way is deleted again, tasks included.

        Raises:
            pydantic.ValidationError: If the name or a task is invalid
        """
        goal_create = GoalCreate(name=name, description=description)
        task_creates = [TaskCreate.model_validate(task) for task in tasks]

        return await self._persist(
            "goal with tasks",
            self._create_goal_with_tasks(goal_create, task_creates),
        )

    async def _create_goal_with_tasks(
        self,
        goal_create: GoalCreate,
        task_creates: list[TaskCreate],
    ) -> tuple[Goal, list[Task]]:
        async with self.database.transaction() as session:
            goal = await self.goals.create_goal(goal_create, session=session)
            created = []
            try:
                for task_create in task_creates:
                    created.append(await self.tasks.create_task(goal.id, task_create, session=session))
            except (PyMongoError, ValueError):
                if session is None:
                    await self._discard_goal(goal)
                raise

        # Without a session the services have already notified
        if session is not None:
            await self.notifier.created(GOALS, goal.id)
            for task in created:
                await self.notifier.created(TASKS, task.id)

        return goal, created

    async def _discard_goal(self, goal: Goal) -> None:
        """Remove a goal whose initial tasks could not all be stored."""
        try:
            await self.goals.delete_goal(goal.id)
        except PyMongoError as e:
            logger.error(f"Error removing partially created goal {goal.id}: {e}")

    async def list_goals(self) -> list[Goal]:
        return await self._fetch("goals", self.goals.list_goals(), [])

    async def update_goal(
        self,
        goal: EntityRef,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Optional[Goal]:
        goal_update = GoalUpdate(name=name, description=description)
        return await self._persist("goal", self.goals.update_goal(_id_of(goal), goal_update))

    async def delete_goal(self, goal: EntityRef) -> bool:
        """Delete a goal and all of its tasks."""
        result = await self._persist("delete goal", self._deleted(self.goals.delete_goal(_id_of(goal))))
        return bool(result)

    async def goal_progress(self, goal: EntityRef) -> GoalProgress:
        goal_id = _id_of(goal)
        return await self._fetch(
            "goal progress",
            self.goals.get_progress(goal_id),
            GoalProgress(goal_id=goal_id),
        )

    async def create_task(
        self,
        text: str,
        goal: EntityRef,
        due_date: Optional[datetime] = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
    ) -> Optional[Task]:
        """
        Add a task at the end of a goal's task list.

        Raises:
            pydantic.ValidationError: If the text is blank
        """
        task_create = TaskCreate(text=text, due_date=due_date, priority=priority)
        return await self._persist("task", self.tasks.create_task(_id_of(goal), task_create))

    async def list_tasks(self, goal: EntityRef) -> list[Task]:
        return await self._fetch("tasks", self.tasks.list_tasks(_id_of(goal)), [])

    async def toggle_task_completion(self, task: EntityRef) -> Optional[Task]:
        return await self._persist("task", self.tasks.toggle_completion(_id_of(task)))

    async def set_task_completed(self, task: EntityRef, is_completed: bool = True) -> Optional[Task]:
        return await self._persist("task", self.tasks.set_completed(_id_of(task), is_completed))

    async def delete_task(self, task: EntityRef) -> bool:
        result = await self._persist("delete task", self._deleted(self.tasks.delete_task(_id_of(task))))
        return bool(result)

    # Knowledge snippets

    async def create_knowledge_snippet(
        self,
        content: str,
        title: Optional[str] = None,
        language_or_type: Optional[str] = None,
        tags: Optional[str] = None,
    ) -> Optional[KnowledgeSnippet]:
        """
        Store a new snippet. Snippets start out as non-favourites.

        Raises:
            pydantic.ValidationError: If content is empty
        """
        snippet_create = KnowledgeSnippetCreate(
            title=title,
            content=content,
            language_or_type=language_or_type,
            tags=tags,
        )
        return await self._persist("knowledge snippet", self.snippets.create_snippet(snippet_create))

    async def list_knowledge_snippets(
        self,
        favorites_only: bool = False,
        tag: Optional[str] = None,
    ) -> list[KnowledgeSnippet]:
        return await self._fetch(
            "knowledge snippets",
            self.snippets.list_snippets(favorites_only=favorites_only, tag=tag),
            [],
        )

    async def update_knowledge_snippet(
        self,
        snippet: EntityRef,
        **changes,
    ) -> Optional[KnowledgeSnippet]:
        """
        Save edits to a snippet and stamp its last access time.

        Raises:
            pydantic.ValidationError: If content is set to empty
        """
        snippet_update = KnowledgeSnippetUpdate(**changes)
        return await self._persist(
            "knowledge snippet",
            self.snippets.update_snippet(_id_of(snippet), snippet_update),
        )

    async def toggle_favorite(self, snippet: EntityRef) -> Optional[KnowledgeSnippet]:
        return await self._persist("knowledge snippet", self.snippets.toggle_favorite(_id_of(snippet)))

    async def touch_last_accessed(self, snippet: EntityRef) -> Optional[KnowledgeSnippet]:
        return await self._persist("knowledge snippet", self.snippets.touch_last_accessed(_id_of(snippet)))

    async def delete_knowledge_snippet(self, snippet: EntityRef) -> bool:
        result = await self._persist(
            "delete knowledge snippet",
            self._deleted(self.snippets.delete_snippet(_id_of(snippet))),
        )
        return bool(result)

    async def delete_all_knowledge_snippets(self) -> int:
        result = await self._persist("delete knowledge snippets", self.snippets.delete_all_snippets())
        return result or 0

    # Widgets

    async def create_widget_config(
        self,
        widget_type: WidgetType,
        payload: Optional[bytes] = None,
    ) -> Optional[WidgetConfig]:
        """
        Add a widget at the end of the dashboard.

        Does not enforce one widget per type; see add_widget.
        """
        widget_create = WidgetConfigCreate(type=widget_type, payload=payload)
        return await self._persist("widget", self.widgets.create_widget_config(widget_create))

    async def list_widget_configs(self, widget_type: Optional[WidgetType] = None) -> list[WidgetConfig]:
        return await self._fetch("widgets", self.widgets.list_widget_configs(widget_type), [])

    async def delete_widget_config(self, widget: EntityRef) -> bool:
        result = await self._persist(
            "delete widget",
            self._deleted(self.widgets.delete_widget_config(_id_of(widget))),
        )
        return bool(result)

    async def can_add_widget(self, widget_type: WidgetType) -> bool:
        """
        A widget type can be added while no widget of that type exists.

        Answers False when the dashboard cannot be read.
        """
        existing = await self._fetch("widgets", self.widgets.list_widget_configs(widget_type), None)
        return existing == []

    async def available_widget_types(self) -> list[WidgetType]:
        """Widget types the add-widget flow still offers; none if unreadable."""
        widgets = await self._fetch("widgets", self.widgets.list_widget_configs(), None)
        if widgets is None:
            return []

        taken = {widget.type for widget in widgets}
        return [widget_type for widget_type in WidgetType if widget_type not in taken]

    async def add_widget(
        self,
        widget_type: WidgetType,
        payload: Optional[bytes] = None,
    ) -> Optional[WidgetConfig]:
        """
        Add-widget flow: create a widget unless one of the type exists.

        Returns:
            The new widget, or None when the type is already on the dashboard
            or the dashboard could not be read
        """
        widget_type = WidgetType(widget_type)
        if not await self.can_add_widget(widget_type):
            logger.info(f"Widget {widget_type.value} not added")
            return None

        return await self.create_widget_config(widget_type, payload)

    @staticmethod
    async def _deleted(delete: Awaitable) -> bool:
        await delete
        return True

"""
Equipment Service.

Business logic for equipment records. Every create and every change of
status or assignee appends history rows computed against the stored
values, so the audit trail cannot drift from the record.
"""

from io import BytesIO
from typing import Any
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy.ext.asyncio import AsyncSession

from itdesk.backend.core.exceptions import ConflictError, NotFoundError, ValidationError
from itdesk.backend.models.enums import Category, EquipmentStatus
from itdesk.backend.models.equipment import Equipment, EquipmentHistory
from itdesk.backend.models.user import User
from itdesk.backend.repositories.equipment import EquipmentHistoryRepository, EquipmentRepository
from itdesk.backend.repositories.user import UserRepository
from itdesk.backend.schemas.equipment import (
    EquipmentCreate,
    EquipmentUpdate,
    ImportResult,
    ImportRowError,
)
from itdesk.backend.services.base import BaseService
from itdesk.backend.services.outbox import Notifier

ACTION_CREATED = "Created"
ACTION_ASSIGNED = "Assigned"
ACTION_RETURNED = "Returned"
ACTION_STATUS_CHANGED = "Status changed"

DETAILS_CREATED = "Added to inventory"
DETAILS_RETURNED = "Returned to storage"

TEMPLATE_HEADERS = [
    "Inventory number",
    "Name",
    "Type",
    "Status",
    "Employee (Last First)",
    "Department",
    "Description",
]
TEMPLATE_EXAMPLE_ROW = [
    "INV-0001",
    "ThinkPad T14",
    "Laptop",
    EquipmentStatus.ACTIVE.value,
    "Ivanov Ivan",
    "Accounting",
    "16 GB RAM",
]
MIN_IMPORT_CELLS = 3


def assigned_details(user: User) -> str:
    return f"Assigned: {user.display_name}"


def status_changed_details(old: EquipmentStatus, new: EquipmentStatus) -> str:
    return f"Status changed from {old.value} to {new.value}"


def parse_status(value: Any) -> EquipmentStatus:
    """
    Parse a spreadsheet status cell.

    Accepts enum values and names in any case, with spaces for underscores.

    Raises:
        ValueError: For anything else
    """
    text = str(value).strip().lower().replace(" ", "_").replace("-", "_")
    return EquipmentStatus(text)


def _cell_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class EquipmentService(BaseService):
    """Service for equipment records, their history and spreadsheet import."""

    def __init__(self, session: AsyncSession, notifier: Notifier | None = None) -> None:
        super().__init__(session, notifier)
        self.repo = EquipmentRepository(session)
        self.history_repo = EquipmentHistoryRepository(session)
        self.user_repo = UserRepository(session)

    async def search(
        self,
        inventory_number: str | None = None,
        employee_name: str | None = None,
    ) -> list[Equipment]:
        """
        Search equipment.

        Args:
            inventory_number: Case-insensitive fragment of the inventory number
            employee_name: Case-insensitive fragment of the assignee's name

        Returns:
            Matching items, most recently updated first
        """
        return await self.repo.search(
            inventory_number=(inventory_number or "").strip() or None,
            employee_name=(employee_name or "").strip() or None,
        )

    async def get(self, equipment_id: int) -> Equipment:
        return await self.repo.get_by_id(equipment_id)

    async def history(self, equipment_id: int) -> list[EquipmentHistory]:
        """History rows for an item, newest first."""
        await self.repo.get_by_id(equipment_id)
        return await self.history_repo.list_for_equipment(equipment_id)

    async def create(self, data: EquipmentCreate, actor_id: int | None = None) -> Equipment:
        """
        Create an equipment record.

        Appends a "Created" history row, and an "Assigned" row when the item
        is created with an assignee.

        Raises:
            ValidationError: If a required field is empty
            ConflictError: If the inventory number is taken
            NotFoundError: If the assignee does not exist
        """
        fields = data.model_dump()
        self._validate_required(fields, ["inventory_number", "name", "type"])
        fields["inventory_number"] = fields["inventory_number"].strip()

        if await self.repo.get_by_inventory_number(fields["inventory_number"]) is not None:
            raise ConflictError(f"Inventory number {fields['inventory_number']} already exists")
        assignee = await self._resolve_assignee(fields.get("assigned_to_user_id"))

        equipment = await self._execute_db_operation(
            "create_equipment",
            self.repo.create(**fields),
        )
        await self._append_history(equipment.id, ACTION_CREATED, DETAILS_CREATED, actor_id)
        if assignee is not None:
            await self._append_history(equipment.id, ACTION_ASSIGNED, assigned_details(assignee), assignee.id)
            self._notify_user(
                assignee,
                f"Equipment {equipment.inventory_number} ({equipment.name}) has been assigned to you.",
            )

        self._log_operation(
            "Equipment created",
            equipment_id=equipment.id,
            inventory_number=equipment.inventory_number,
            assigned_to_user_id=equipment.assigned_to_user_id,
        )
        await self._notify_channel(
            Category.EQUIPMENT,
            f"New equipment {equipment.inventory_number}: {equipment.name} ({equipment.type})",
        )
        return equipment

    async def update(
        self,
        equipment_id: int,
        data: EquipmentUpdate | dict[str, Any],
        actor_id: int | None = None,
    ) -> Equipment:
        """
        Apply a partial update.

        History is derived by comparing the stored values with the new ones:
        one "Status changed" row when the status differs, one "Assigned"
        row when a different user is assigned, one "Returned" row when the
        assignee is cleared. Unchanged values append nothing.

        Raises:
            NotFoundError: If the item or the new assignee does not exist
            ConflictError: If the new inventory number is taken
        """
        changes = data.model_dump(exclude_unset=True) if isinstance(data, EquipmentUpdate) else dict(data)
        current = await self.repo.get_by_id(equipment_id)
        old_status = current.status
        old_assignee_id = current.assigned_to_user_id

        present = [name for name in ("inventory_number", "name", "type") if name in changes]
        for name in present:
            if isinstance(changes[name], str):
                changes[name] = changes[name].strip()
        self._validate_required(changes, present)
        if "status" in changes and changes["status"] is None:
            raise ValidationError("status cannot be empty", details={"field": "status"})

        new_number = changes.get("inventory_number")
        if new_number is not None and new_number != current.inventory_number:
            if await self.repo.get_by_inventory_number(new_number) is not None:
                raise ConflictError(f"Inventory number {new_number} already exists")

        assignee = None
        if "assigned_to_user_id" in changes:
            assignee = await self._resolve_assignee(changes["assigned_to_user_id"])

        equipment = await self._execute_db_operation(
            "update_equipment",
            self.repo.update(equipment_id, **changes),
        )

        if equipment.status != old_status:
            await self._append_history(
                equipment.id,
                ACTION_STATUS_CHANGED,
                status_changed_details(old_status, equipment.status),
                actor_id,
            )

        if equipment.assigned_to_user_id != old_assignee_id:
            if assignee is not None:
                await self._append_history(equipment.id, ACTION_ASSIGNED, assigned_details(assignee), assignee.id)
                self._notify_user(
                    assignee,
                    f"Equipment {equipment.inventory_number} ({equipment.name}) has been assigned to you.",
                )
            else:
                await self._append_history(equipment.id, ACTION_RETURNED, DETAILS_RETURNED, actor_id)

        self._log_operation(
            "Equipment updated",
            equipment_id=equipment.id,
            fields=sorted(changes),
        )
        return equipment

    def build_import_template(self) -> bytes:
        """Spreadsheet with the import header and one example row."""
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "Equipment"
        sheet.append(TEMPLATE_HEADERS)
        sheet.append(TEMPLATE_EXAMPLE_ROW)
        for column, header in zip("ABCDEFG", TEMPLATE_HEADERS):
            sheet.column_dimensions[column].width = max(14, len(header) + 2)

        buffer = BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    async def import_workbook(self, content: bytes, actor_id: int | None = None) -> ImportResult:
        """
        Import equipment from the first sheet of an xlsx file.

        The first row is a header. Rows with fewer than three filled cells
        or an empty required column are skipped. Rows with an invalid
        status or an inventory number already in use are reported as
        errors. An unknown employee leaves the item unassigned and is
        reported as a warning.

        Raises:
            ValidationError: If the file is not a readable workbook
        """
        try:
            workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
        except (InvalidFileException, BadZipFile, KeyError, OSError) as e:
            raise ValidationError("File is not a valid .xlsx workbook") from e

        try:
            rows = [
                (index, list(row[: len(TEMPLATE_HEADERS)]))
                for index, row in enumerate(
                    workbook.worksheets[0].iter_rows(min_row=2, values_only=True),
                    start=2,
                )
            ]
        finally:
            workbook.close()

        result = ImportResult()
        numbers = [_cell_text(values[0]) for _, values in rows if values]
        taken = await self.repo.existing_inventory_numbers([n for n in numbers if n])
        seen_in_file: set[str] = set()

        for row_number, values in rows:
            values = values + [None] * (len(TEMPLATE_HEADERS) - len(values))
            number, name, kind, status_cell, employee, department, description = (
                _cell_text(v) for v in values
            )

            filled = sum(1 for v in values if _cell_text(v) is not None)
            if filled < MIN_IMPORT_CELLS or not (number and name and kind):
                result.skipped += 1
                continue

            if number in taken or number in seen_in_file:
                result.errors.append(
                    ImportRowError(row=row_number, message=f"Inventory number {number} already exists")
                )
                continue

            try:
                status = parse_status(status_cell) if status_cell else EquipmentStatus.STORAGE
            except ValueError:
                result.errors.append(ImportRowError(row=row_number, message=f"Unknown status {status_cell!r}"))
                continue

            assignee_id = None
            if employee:
                assignee = await self._find_employee(employee)
                if assignee is None:
                    result.warnings.append(
                        ImportRowError(row=row_number, message=f"Employee {employee!r} not found; left unassigned")
                    )
                else:
                    assignee_id = assignee.id

            await self.create(
                EquipmentCreate(
                    inventory_number=number,
                    name=name,
                    type=kind,
                    status=status,
                    assigned_to_user_id=assignee_id,
                    department=department,
                    description=description,
                ),
                actor_id=actor_id,
            )
            seen_in_file.add(number)
            result.created += 1

        self._log_operation(
            "Equipment import finished",
            created=result.created,
            skipped=result.skipped,
            errors=len(result.errors),
        )
        return result

    async def _find_employee(self, full_name: str) -> User | None:
        """Resolve an "Last First" cell to a user."""
        parts = full_name.split()
        if len(parts) < 2:
            return None
        return await self.user_repo.get_by_full_name(parts[0], " ".join(parts[1:]))

    async def _resolve_assignee(self, user_id: int | None) -> User | None:
        if user_id is None:
            return None
        user = await self.user_repo.get_by_id_or_none(user_id)
        if user is None:
            raise NotFoundError("Assigned user not found")
        return user

    async def _append_history(
        self,
        equipment_id: int,
        action: str,
        details: str,
        user_id: int | None,
    ) -> EquipmentHistory:
        return await self._execute_db_operation(
            "append_equipment_history",
            self.history_repo.create(
                equipment_id=equipment_id,
                action=action,
                details=details,
                user_id=user_id,
            ),
        )

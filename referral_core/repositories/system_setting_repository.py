"""
System setting repository.

Data access layer for versioned administrator settings.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from referral_core.models.system_setting import SystemSetting
from referral_core.repositories.base import BaseRepository


class SystemSettingRepository(BaseRepository[SystemSetting]):
    """System setting repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize system setting repository."""
        super().__init__(SystemSetting, session)

    async def get_value(self, key: str) -> dict[str, Any] | None:
        """
        Get the current value of a setting.

        Args:
            key: Setting key

        Returns:
            JSON value or None if never saved
        """
        setting = await self.get_by_id(key)
        return setting.value if setting else None

    async def replace(
        self,
        key: str,
        value: dict[str, Any],
        description: str | None,
        updated_by: int | None,
    ) -> SystemSetting:
        """
        Replace a setting's value and bump its version.

        The existing row is locked so concurrent replacements serialize
        and each gets its own version number.

        Args:
            key: Setting key
            value: New JSON value (full replacement)
            description: Human readable description
            updated_by: Operator user ID

        Returns:
            Updated setting
        """
        setting = await self.get_for_update(key)

        if setting is None:
            return await self.create(
                key=key,
                value=value,
                description=description,
                version=1,
                updated_by=updated_by,
            )

        setting.value = value
        setting.version = setting.version + 1
        setting.updated_by = updated_by
        if description is not None:
            setting.description = description

        await self.session.flush()
        await self.session.refresh(setting)
        return setting

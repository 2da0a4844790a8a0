"""
Unit tests for Telegram keyboard builders.
"""

from itdesk.backend.models.enums import Category, Role
from itdesk.telegram.keyboards.common import (
    EQUIPMENT_BUTTON,
    HELP_BUTTON,
    PASSWORDS_BUTTON,
    ROLE_BUTTONS,
    TASKS_BUTTON,
    get_main_menu_keyboard,
    get_role_keyboard,
)


def _labels(markup) -> list[str]:
    return [button.text for row in markup.keyboard for button in row]


class TestRoleKeyboard:

    def test_offers_every_self_selectable_role(self):
        """Should show one button per role except admin."""
        labels = _labels(get_role_keyboard())

        assert sorted(labels) == sorted(ROLE_BUTTONS)
        assert Role.ADMIN not in ROLE_BUTTONS.values()

    def test_is_one_time(self):
        assert get_role_keyboard().one_time_keyboard is True


class TestMainMenuKeyboard:

    def test_only_granted_sections_shown(self):
        """Should hide sections the user has no access to."""
        markup = get_main_menu_keyboard(
            {Category.EQUIPMENT: False, Category.PASSWORDS: False, Category.TASKS: True}
        )

        assert _labels(markup) == [TASKS_BUTTON, HELP_BUTTON]

    def test_all_sections_for_full_access(self):
        markup = get_main_menu_keyboard({category: True for category in Category})

        assert set(_labels(markup)) == {EQUIPMENT_BUTTON, TASKS_BUTTON, PASSWORDS_BUTTON, HELP_BUTTON}

    def test_help_always_present(self):
        assert _labels(get_main_menu_keyboard({})) == [HELP_BUTTON]

"""Tests for selectors and view queries."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from monkey_link.actions.selector import (
    AccessibilityId,
    MonkeyView,
    TextMultiSelector,
    ViewId,
    ViewIdSelector,
    ViewLocation,
    parse_selector,
)
from monkey_link.errors import MonkeyError


class TestParseSelector:
    """Tests for parse_selector."""

    def test_parse_id_selector(self) -> None:
        """Should parse id:... to ViewIdSelector."""
        assert parse_selector("id:id/button1") == ViewIdSelector("id/button1")

    def test_parse_text_with_quotes(self) -> None:
        """Should strip quotes from text selectors."""
        assert parse_selector('text:"Sign in"') == TextMultiSelector("Sign in")
        assert parse_selector("text:'OK'") == TextMultiSelector("OK")

    @pytest.mark.parametrize("target", ["", "id:", "desc:Login", "coords:1,2"])
    def test_invalid_selector_raises_error(self, target: str) -> None:
        """Unknown or empty selectors are rejected."""
        with pytest.raises(MonkeyError) as exc_info:
            parse_selector(target)
        assert exc_info.value.code == "ERR_INVALID_ARGUMENT"


class TestMonkeyView:
    """Tests for queryview commands."""

    @pytest.mark.asyncio
    async def test_view_id_queries(self, mock_session: MagicMock, sent: Any) -> None:
        """Queries by view id use the viewid form."""
        mock_session.execute.return_value = "Hello"
        view = MonkeyView(mock_session, ViewId("id/title"))

        assert await view.text() == "Hello"
        assert sent(mock_session) == ["queryview viewid id/title gettext"]

    @pytest.mark.asyncio
    async def test_accessibility_id_queries(self, mock_session: MagicMock, sent: Any) -> None:
        """Queries by accessibility id use window and view ids."""
        mock_session.execute.return_value = "android.widget.Button"
        view = MonkeyView(mock_session, AccessibilityId(2, 17))

        assert await view.class_name() == "android.widget.Button"
        assert sent(mock_session) == ["queryview accessibilityid 2 17 getclass"]

    @pytest.mark.asyncio
    async def test_location(self, mock_session: MagicMock) -> None:
        """getlocation parses into bounds."""
        mock_session.execute.return_value = "100 200 50 20"
        location = await MonkeyView(mock_session, ViewId("id/x")).location()

        assert location == ViewLocation(x=100, y=200, width=50, height=20)
        assert location.center == (125, 210)

    @pytest.mark.asyncio
    async def test_bad_location_rejected(self, mock_session: MagicMock) -> None:
        """Unparseable bounds raise with the reply."""
        mock_session.execute.return_value = "nope"
        with pytest.raises(MonkeyError) as exc_info:
            await MonkeyView(mock_session, ViewId("id/x")).location()
        assert exc_info.value.code == "ERR_REMOTE_REJECTED"

    @pytest.mark.asyncio
    async def test_boolean_getters_and_setters(self, mock_session: MagicMock, sent: Any) -> None:
        """Boolean replies are parsed; setters send true/false."""
        mock_session.execute.return_value = "true"
        view = MonkeyView(mock_session, ViewId("id/box"))

        assert await view.is_checked() is True
        await view.set_selected(False)
        await view.set_focused(True)

        assert sent(mock_session) == [
            "queryview viewid id/box getchecked",
            "queryview viewid id/box setselected false",
            "queryview viewid id/box setfocused true",
        ]

    @pytest.mark.asyncio
    async def test_parent_and_children(self, mock_session: MagicMock) -> None:
        """Relatives come back as accessibility-addressed views."""
        view = MonkeyView(mock_session, ViewId("id/list"))

        mock_session.execute.return_value = "1 5"
        parent = await view.parent()
        mock_session.execute.return_value = "1 6 1 7"
        children = await view.children()

        assert parent.address == AccessibilityId(1, 5)
        assert [c.address for c in children] == [AccessibilityId(1, 6), AccessibilityId(1, 7)]

    @pytest.mark.asyncio
    async def test_unpaired_ids_rejected(self, mock_session: MagicMock) -> None:
        """An odd number of ids is a bad reply."""
        mock_session.execute.return_value = "1 2 3"
        with pytest.raises(MonkeyError) as exc_info:
            await MonkeyView(mock_session, ViewId("id/list")).children()
        assert exc_info.value.code == "ERR_REMOTE_REJECTED"
        assert "getchildren" in exc_info.value.context["command"]


class TestSelectors:
    """Tests for selector resolution."""

    @pytest.mark.asyncio
    async def test_view_id_selector_needs_no_round_trip(self, mock_session: MagicMock) -> None:
        """A view id selector addresses the view directly."""
        view = await ViewIdSelector("id/ok").get_view(mock_session)

        assert view.address == ViewId("id/ok")
        mock_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_text_selector_no_matches(self, mock_session: MagicMock) -> None:
        """An empty reply means no views."""
        mock_session.execute.return_value = ""
        assert await TextMultiSelector("missing").get_views(mock_session) == []

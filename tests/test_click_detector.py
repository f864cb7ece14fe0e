"""Tests for click_detector.py and pydeck_click_handler.py - Pydeck click parsing.

Tests the ClickDetector class that converts Pydeck click data into selection
events, and the raw st_deckgl event parsing. This is testable without
Streamlit since it's pure logic parsing dicts.
"""

from types import SimpleNamespace

import pytest

from panorama_map.constants import ClickConfig
from panorama_map.core.events import AnnotationDeselected, AnnotationSelected
from panorama_map.model.annotation import Annotation
from panorama_map.model.coordinate import Coordinate
from panorama_map.ui import pydeck_click_handler
from panorama_map.ui.click_detector import ClickDetector
from panorama_map.ui.pydeck_click_handler import (
    PydeckClickResult,
    get_click_id,
    parse_click_event,
    render_pydeck_map,
)

STATION = Annotation(
    id="kichijoji-station",
    coordinate=Coordinate(latitude=35.70312, longitude=139.57975),
    title="Kichijoji Station",
)
PARK = Annotation(
    id="inokashira-park",
    coordinate=Coordinate(latitude=35.69985, longitude=139.57353),
    title="Inokashira Park",
)


@pytest.fixture
def detector() -> ClickDetector:
    """ClickDetector over two annotations."""
    return ClickDetector(annotations=[STATION, PARK])


def _annotation_click(annotation: Annotation) -> dict:
    """Picked object as st_deckgl delivers it (layer record fields)."""
    return annotation.to_layer_record(selected=False)


class TestAnnotationClicks:
    """Clicks on annotation markers select them."""

    def test_click_selects_annotation(self, detector: ClickDetector) -> None:
        event = detector.detect(
            clicked_object=_annotation_click(STATION),
            clicked_coordinate=[139.57975, 35.70312],
            selected_annotation_id=None,
        )
        assert event == AnnotationSelected(coordinate=STATION.coordinate, annotation_id=STATION.id)

    def test_click_other_annotation_switches_selection(self, detector: ClickDetector) -> None:
        event = detector.detect(
            clicked_object=_annotation_click(PARK),
            clicked_coordinate=[139.57353, 35.69985],
            selected_annotation_id=STATION.id,
        )
        assert event == AnnotationSelected(coordinate=PARK.coordinate, annotation_id=PARK.id)

    def test_click_selected_annotation_is_ignored(self, detector: ClickDetector) -> None:
        """Reselecting the current annotation does not change the selection."""
        event = detector.detect(
            clicked_object=_annotation_click(STATION),
            clicked_coordinate=[139.57975, 35.70312],
            selected_annotation_id=STATION.id,
        )
        assert event is None

    def test_unknown_id_uses_record_position(self, detector: ClickDetector) -> None:
        obj = {"type": ClickConfig.TYPE_ANNOTATION, "id": "unknown", "lat": 35.71, "lon": 139.59}
        event = detector.detect(clicked_object=obj, clicked_coordinate=None, selected_annotation_id=None)
        expected = Coordinate(latitude=35.71, longitude=139.59)
        assert event == AnnotationSelected(coordinate=expected, annotation_id="unknown")

    def test_unknown_id_without_position_is_ignored(self, detector: ClickDetector) -> None:
        obj = {"type": ClickConfig.TYPE_ANNOTATION, "id": "unknown"}
        assert detector.detect(clicked_object=obj, clicked_coordinate=None, selected_annotation_id=None) is None

    def test_unknown_object_type_is_ignored(self, detector: ClickDetector) -> None:
        obj = {"type": "building", "id": "b1"}
        event = detector.detect(clicked_object=obj, clicked_coordinate=[139.5, 35.7], selected_annotation_id=None)
        assert event is None


class TestEmptyMapClicks:
    """Clicks on empty map deselect."""

    def test_empty_map_click_deselects(self, detector: ClickDetector) -> None:
        event = detector.detect(
            clicked_object=None,
            clicked_coordinate=[139.5800, 35.7000],
            selected_annotation_id=STATION.id,
        )
        assert event == AnnotationDeselected()

    def test_empty_map_click_without_selection_is_ignored(self, detector: ClickDetector) -> None:
        event = detector.detect(clicked_object=None, clicked_coordinate=[139.58, 35.70], selected_annotation_id=None)
        assert event is None

    def test_no_object_no_coord_returns_none(self, detector: ClickDetector) -> None:
        assert detector.detect(clicked_object=None, clicked_coordinate=None, selected_annotation_id="x") is None


class TestParseClickEvent:
    """Raw st_deckgl event parsing (object properties are spread into the event)."""

    def test_empty_map_event(self) -> None:
        result = parse_click_event({"coordinate": [139.58, 35.70], "eventType": "click"})
        assert result.is_empty_map_click
        assert result.clicked_coordinate == [139.58, 35.70]

    def test_object_event(self) -> None:
        event = {**_annotation_click(STATION), "coordinate": [139.57975, 35.70312], "eventType": "click"}
        result = parse_click_event(event)

        assert result.is_object_click
        assert result.clicked_object is not None
        assert result.clicked_object["id"] == STATION.id
        assert "coordinate" not in result.clicked_object
        assert "eventType" not in result.clicked_object

    @pytest.mark.parametrize(
        "event",
        [
            pytest.param(None, id="none"),
            pytest.param({}, id="empty_dict"),
            pytest.param("click", id="not_a_dict"),
            pytest.param({"coordinate": [139.58]}, id="short_coordinate"),
        ],
    )
    def test_no_click_data(self, event: object) -> None:
        result = parse_click_event(event)
        assert result == PydeckClickResult.empty()

    def test_click_id_rounds_coordinates(self) -> None:
        """Sub-meter jitter of the same click produces the same id."""
        first = get_click_id(obj=None, coord=[139.580001, 35.700001])
        second = get_click_id(obj=None, coord=[139.580002, 35.700002])
        assert first == second

    def test_click_id_includes_object(self) -> None:
        click_id = get_click_id(obj={"type": "annotation", "id": "a"}, coord=[139.58, 35.70])
        assert click_id.startswith("annotation_a_")


class TestRenderDeduplication:
    """The component repeats its last click on every rerun; each click is reported once."""

    @pytest.fixture
    def component(self, monkeypatch) -> list:
        """Replaces st_deckgl with a scripted sequence of returned events."""
        events: list = []
        monkeypatch.setattr(pydeck_click_handler, "st", SimpleNamespace(session_state={}))
        monkeypatch.setattr(pydeck_click_handler, "st_deckgl", lambda deck, **kwargs: events.pop(0))
        return events

    def test_repeated_event_reported_once(self, component: list) -> None:
        event = {**_annotation_click(STATION), "coordinate": [139.57975, 35.70312], "eventType": "click"}
        component.extend([event, event])

        first = render_pydeck_map(deck=None, key="main_map_0_1")  # type: ignore[arg-type]
        second = render_pydeck_map(deck=None, key="main_map_0_1")  # type: ignore[arg-type]

        assert first.is_object_click
        assert second == PydeckClickResult.empty()

    def test_new_click_is_reported(self, component: list) -> None:
        component.extend(
            [
                {"coordinate": [139.58, 35.70], "eventType": "click"},
                {"coordinate": [139.59, 35.71], "eventType": "click"},
            ]
        )

        render_pydeck_map(deck=None, key="main_map_0_1")  # type: ignore[arg-type]
        second = render_pydeck_map(deck=None, key="main_map_0_1")  # type: ignore[arg-type]

        assert second.is_empty_map_click
        assert second.clicked_coordinate == [139.59, 35.71]

    def test_no_event(self, component: list) -> None:
        component.append(None)
        assert render_pydeck_map(deck=None, key="main_map_0_1") == PydeckClickResult.empty()  # type: ignore[arg-type]

from typing import List, Optional

import pytest

from models.session_models import Language, SessionState
from services.conversation.controller import ConversationController
from services.conversation.scheduler import ConversationTimings
from services.waste.analysis_adapter import WasteAnalysisAdapter
from tests.helpers import FAST_TIMINGS, FakeClassifier, FakeSink, png_bytes


@pytest.fixture
def image_bytes() -> bytes:
    return png_bytes()


@pytest.fixture
def classifier() -> FakeClassifier:
    return FakeClassifier()


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def make_controller(classifier, sink):
    created: List[ConversationController] = []

    def factory(
        *,
        user_id: Optional[str] = None,
        language: Language = Language.ENGLISH,
        waste_classifier=classifier,
        persistence=sink,
        timings: ConversationTimings = FAST_TIMINGS,
    ) -> ConversationController:
        state = SessionState(session_id=f"test-{len(created)}", user_id=user_id, language=language)
        controller = ConversationController(
            state,
            adapter=WasteAnalysisAdapter(waste_classifier, timeout=1.0),
            persistence=persistence,
            timings=timings,
        )
        created.append(controller)
        return controller

    return factory


@pytest.fixture
def controller(make_controller) -> ConversationController:
    return make_controller()

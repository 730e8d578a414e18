import pytest

from common.schemas import EngineCommand, RecognitionErrorEvent, RecognitionEvent
from recognition.engine import BridgeRecognitionEngine, get_recognition_factory


class TestCapabilityLookup:
    def test_standard_variant_wins(self):
        def standard():
            return "standard"

        def prefixed():
            return "prefixed"

        factory = get_recognition_factory(
            {"webkitSpeechRecognition": prefixed, "SpeechRecognition": standard}
        )
        assert factory is standard

    def test_falls_back_to_prefixed_variant(self):
        factory = get_recognition_factory(
            {"SpeechRecognition": None, "webkitSpeechRecognition": BridgeRecognitionEngine}
        )
        assert factory is BridgeRecognitionEngine

    def test_none_when_nothing_available(self):
        assert get_recognition_factory({}) is None
        assert get_recognition_factory({"mozSpeechRecognition": BridgeRecognitionEngine}) is None


class TestBridgeRecognitionEngine:
    @pytest.fixture
    def engine(self):
        return BridgeRecognitionEngine(lang="en-GB", continuous=True, interim_results=False)

    def test_start_queues_command(self, engine):
        engine.start()
        assert engine.running
        [command] = engine.drain()
        assert command.command == EngineCommand.start
        assert command.lang == "en-GB"
        assert command.interim_results is False
        assert engine.drain() == []

    def test_start_twice_is_rejected(self, engine):
        engine.start()
        with pytest.raises(RuntimeError, match="already started"):
            engine.start()

    def test_stop_and_abort_require_running(self, engine):
        with pytest.raises(RuntimeError):
            engine.stop()
        with pytest.raises(RuntimeError):
            engine.abort()
        assert engine.outbox == []

    def test_stop_queues_command(self, engine):
        engine.start()
        engine.stop()
        assert [c.command for c in engine.drain()] == [EngineCommand.start, EngineCommand.stop]
        assert not engine.running

    def test_dispatch_result(self, engine):
        received = []
        engine.on_result = received.append
        engine.dispatch({
            "type": "result",
            "result_index": 1,
            "results": [
                {"is_final": True, "alternatives": [{"transcript": "a"}]},
                {"is_final": False, "alternatives": [{"transcript": "b"}]},
            ],
        })
        [event] = received
        assert isinstance(event, RecognitionEvent)
        assert event.result_index == 1
        assert event.results[1].text == "b"

    def test_dispatch_error_and_end_mark_engine_stopped(self, engine):
        errors, ends = [], []
        engine.on_error = errors.append
        engine.on_end = lambda: ends.append(True)

        engine.start()
        engine.dispatch({"type": "error", "error": "no-speech"})
        assert not engine.running
        assert isinstance(errors[0], RecognitionErrorEvent)
        assert errors[0].error == "no-speech"

        engine.start()
        engine.dispatch({"type": "end"})
        assert not engine.running
        assert ends == [True]

    def test_dispatch_without_handlers(self, engine):
        engine.dispatch({"type": "result", "results": []})
        engine.dispatch({"type": "end"})

    def test_dispatch_unknown_event(self, engine):
        with pytest.raises(ValueError, match="Unknown engine event"):
            engine.dispatch({"type": "speechstart"})

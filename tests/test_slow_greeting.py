"""
Tests for POST /greet/slowgreeting.

The update has to commit only after the delay, must not hold up other requests
while it waits, and its tracing span has to be ended exactly once.
"""
import json
import threading
import time

from opentelemetry.trace import StatusCode

SLOW_SPAN_NAME = "updateGreetingFromJsonSlowlyHandler"


def _slow_spans(span_exporter):
    return [span for span in span_exporter.get_finished_spans() if span.name == SLOW_SPAN_NAME]


def test_slow_greeting_commits_after_delay(app):
    """A concurrent read during the delay still sees the previous greeting."""
    results = {}

    def post_slowly():
        results['response'] = app.test_client().post(
            '/greet/slowgreeting', json={"greeting": "Hi", "delay": 1}
        )

    started = time.monotonic()
    worker = threading.Thread(target=post_slowly)
    worker.start()

    time.sleep(0.3)
    during = app.test_client().get('/greet/greeting')
    read_elapsed = time.monotonic() - started
    assert json.loads(during.data) == {"greeting": "Ciao"}
    assert read_elapsed < 1

    worker.join(timeout=10)
    assert not worker.is_alive()
    assert time.monotonic() - started >= 1

    response = results['response']
    assert response.status_code == 200
    assert json.loads(response.data) == {"greeting": "Hi"}

    after = app.test_client().get('/greet/greeting')
    assert json.loads(after.data) == {"greeting": "Hi"}


def test_slow_greeting_defaults_to_two_seconds(client):
    started = time.monotonic()
    response = client.post('/greet/slowgreeting', json={"greeting": "Hi"})
    assert response.status_code == 200
    assert time.monotonic() - started >= 2


def test_slow_greeting_null_delay_uses_default(client):
    started = time.monotonic()
    response = client.post('/greet/slowgreeting', json={"greeting": "Hi", "delay": None})
    assert response.status_code == 200
    assert time.monotonic() - started >= 2


def test_slow_greeting_missing_greeting_does_not_wait(client):
    started = time.monotonic()
    response = client.post('/greet/slowgreeting', json={"delay": 5})
    elapsed = time.monotonic() - started

    assert response.status_code == 400
    assert response.get_data(as_text=True) == "No greeting in your JSON dude!"
    assert elapsed < 2

    response = client.get('/greet/greeting')
    assert json.loads(response.data) == {"greeting": "Ciao"}


def test_slow_greeting_rejects_negative_delay(client):
    response = client.post('/greet/slowgreeting', json={"greeting": "Hi", "delay": -1})
    assert response.status_code == 422

    data = json.loads(response.data)
    assert data['details'][0]['loc'] == ['delay']


def test_slow_greeting_rejects_delay_over_an_hour(client):
    for delay in (3601, 10 ** 10):
        response = client.post('/greet/slowgreeting', json={"greeting": "Hi", "delay": delay})
        assert response.status_code == 422

        data = json.loads(response.data)
        assert data['details'][0]['loc'] == ['delay']

    response = client.get('/greet/greeting')
    assert json.loads(response.data) == {"greeting": "Ciao"}


def test_concurrent_slow_greetings_do_not_queue(app):
    """A burst of slow updates each finishes close to its own delay."""
    elapsed = {}

    def post_slowly(index, delay):
        started = time.monotonic()
        response = app.test_client().post(
            '/greet/slowgreeting', json={"greeting": f"Hi {index}", "delay": delay}
        )
        assert response.status_code == 200
        elapsed[index] = (delay, time.monotonic() - started)

    workers = [threading.Thread(target=post_slowly, args=(index, 1)) for index in range(8)]
    for worker in workers:
        worker.start()
    time.sleep(0.1)
    quick = threading.Thread(target=post_slowly, args=("quick", 0))
    quick.start()

    for worker in workers + [quick]:
        worker.join(timeout=10)
        assert not worker.is_alive()

    assert len(elapsed) == 9
    for delay, took in elapsed.values():
        assert took < delay + 0.8
    assert elapsed["quick"][1] < 0.5


def test_slow_greeting_rejects_non_integer_delay(client):
    response = client.post('/greet/slowgreeting', json={"greeting": "Hi", "delay": "soon"})
    assert response.status_code == 422

    response = client.get('/greet/greeting')
    assert json.loads(response.data) == {"greeting": "Ciao"}


def test_slow_greeting_commits_on_timer_thread(greet_service):
    seen = {}
    original = greet_service._commit_slow_update

    def recording_commit(greeting, delay, future):
        seen['thread'] = threading.current_thread().name
        return original(greeting, delay, future)

    greet_service._commit_slow_update = recording_commit
    result = greet_service.update_greeting_slowly("Hi", 0)

    assert result == {"greeting": "Hi"}
    assert seen['thread'].startswith("slow-greeting")
    assert seen['thread'] != threading.current_thread().name


def test_slow_greeting_span_ended_once_on_success(client, span_exporter):
    response = client.post('/greet/slowgreeting', json={"greeting": "Hi", "delay": 0})
    assert response.status_code == 200

    spans = _slow_spans(span_exporter)
    assert len(spans) == 1
    assert spans[0].attributes["greeting.delay_seconds"] == 0
    assert spans[0].status.status_code != StatusCode.ERROR


def test_slow_greeting_span_is_child_of_request_span(client, span_exporter):
    client.post('/greet/slowgreeting', json={"greeting": "Hi", "delay": 0})

    request_spans = [
        span for span in span_exporter.get_finished_spans()
        if span.name == "POST /greet/slowgreeting"
    ]
    assert len(request_spans) == 1
    slow_span = _slow_spans(span_exporter)[0]
    assert slow_span.parent.span_id == request_spans[0].context.span_id
    assert slow_span.context.trace_id == request_spans[0].context.trace_id


def test_slow_greeting_span_ended_once_on_failure(client, span_exporter):
    response = client.post('/greet/slowgreeting', json={})
    assert response.status_code == 400

    spans = _slow_spans(span_exporter)
    assert len(spans) == 1
    assert spans[0].status.status_code == StatusCode.ERROR
    assert any(event.name == "exception" for event in spans[0].events)

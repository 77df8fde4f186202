import threading

from pixrefine.errors import DecodeError
from pixrefine.pipeline import ProcessOptions
from pixrefine.worker import TransformWorker


def test_worker_delivers_result(red_png):
    results, errors = [], []
    worker = TransformWorker(results.append, errors.append)
    worker.submit(red_png, ProcessOptions(scale=1.5, format="png"))
    assert worker.join(timeout=30)
    assert errors == []
    assert len(results) == 1
    assert (results[0].width, results[0].height) == (150, 150)


def test_worker_reports_errors():
    results, errors = [], []
    worker = TransformWorker(results.append, errors.append)
    worker.submit(b"garbage", ProcessOptions())
    assert worker.join(timeout=30)
    assert results == []
    assert len(errors) == 1
    assert isinstance(errors[0], DecodeError)


def test_new_submission_supersedes_previous(red_png):
    results = []
    worker = TransformWorker(results.append)
    first = worker.submit(red_png, ProcessOptions(scale=4.0, format="png"))
    second = worker.submit(red_png, ProcessOptions(scale=1.0, format="png"))
    assert first.cancelled
    assert not second.cancelled
    assert worker.join(timeout=30)
    # The superseded run either stopped at a stage boundary or was discarded.
    assert all(r.width == 100 for r in results)


def test_cancel_in_flight(red_png):
    results = []
    worker = TransformWorker(results.append)
    token = worker.submit(red_png, ProcessOptions(scale=2.0))
    worker.cancel()
    assert token.cancelled
    worker.join(timeout=30)


def test_join_without_submission():
    worker = TransformWorker(lambda r: None)
    assert worker.join(timeout=0)


def test_join_from_other_threads_while_submitting(red_png):
    results = []
    worker = TransformWorker(results.append)
    worker.submit(red_png, ProcessOptions(format="png"))
    joined = []
    joiners = [
        threading.Thread(target=lambda: joined.append(worker.join(timeout=30)))
        for _ in range(4)
    ]
    for t in joiners:
        t.start()
    worker.submit(red_png, ProcessOptions(format="png"))
    for t in joiners:
        t.join(timeout=60)
    assert worker.join(timeout=30)
    assert joined == [True] * 4
    assert results and all(r.width == 100 for r in results)

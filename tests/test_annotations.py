from postit.core.types import Box, TrackedDetection
from postit.session.annotations import TrackAnnotations


def _tracked(track_id):
    return TrackedDetection(track_id=track_id, box=Box(0, 0, 10, 10), label="postit", score=0.9)


def test_lock_unlock_and_blank_text():
    ann = TrackAnnotations()
    assert ann.lock(3, "Buy milk")
    assert ann.is_locked(3)
    assert ann.text_for(3) == "Buy milk"
    assert not ann.lock(4, "   ")
    assert not ann.is_locked(4)
    assert ann.unlock(3)
    assert not ann.unlock(3)


def test_toggle_lock():
    ann = TrackAnnotations()
    d = _tracked(7)
    assert ann.toggle_lock(d, "Call Ana") is True
    assert ann.toggle_lock(d, "ignored") is False
    assert ann.toggle_lock(d, "") is None
    assert ann.toggle_lock(_tracked(None), "text") is None


def test_upload_flow():
    ann = TrackAnnotations()
    dets = [_tracked(1), _tracked(2), _tracked(3)]
    ann.lock(1, "a")
    ann.lock(2, "b")

    assert [d.track_id for d in ann.pending_uploads(dets)] == [1, 2]
    ann.mark_uploading([1, 2])
    assert ann.pending_uploads(dets) == []

    ann.mark_uploaded([1])
    ann.mark_upload_failed([2])
    assert [d.track_id for d in ann.pending_uploads(dets)] == [2]

    by_id = {a.track_id: a for a in ann.annotate(dets)}
    assert by_id[1].uploaded and by_id[1].locked and not by_id[1].uploading
    assert by_id[2].text == "b" and not by_id[2].uploaded
    assert not by_id[3].locked and by_id[3].text == ""


def test_reset_clears_everything():
    ann = TrackAnnotations()
    ann.lock(1, "a")
    ann.mark_uploading([1])
    ann.mark_uploaded([5])
    ann.reset()
    assert ann.locked == {} and ann.uploading == set() and ann.uploaded == set()

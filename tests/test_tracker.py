import pytest

from postit.core.geometry import iou
from postit.core.types import Box, Detection
from postit.tracking.assignment import greedy_assign
from postit.tracking.tracker import IouTracker


def _det(l, t, r, b, score=0.9):
    return Detection(Box(l, t, r, b), "postit", score)


def test_greedy_assign_claims_each_track_once():
    tracks = [Box(0, 0, 100, 100), Box(300, 300, 400, 400)]
    dets = [Box(0, 0, 100, 100), Box(10, 0, 110, 100), Box(600, 600, 700, 700)]
    out = greedy_assign(dets, tracks, match_iou=0.3)
    assert [a.track_index for a in out] == [0, None, None]
    assert out[0].iou == 1.0


def test_greedy_assign_never_matches_disjoint_boxes_even_at_zero_threshold():
    out = greedy_assign([Box(0, 0, 10, 10)], [Box(50, 50, 60, 60)], match_iou=0.0)
    assert out[0].track_index is None


def test_single_detection_creates_one_fresh_track():
    tr = IouTracker()
    out = tr.update([_det(0, 0, 80, 80)])
    assert len(out) == 1
    assert out[0].track_id == 1
    assert out[0].box == Box(0, 0, 80, 80)
    assert tr.next_id == 2


def test_drifting_object_keeps_id_and_lags_smoothly():
    alpha = 0.6
    tr = IouTracker(ema_alpha=alpha)
    prev = tr.update([_det(0, 0, 80, 80)])[0]
    for step in range(1, 15):
        x = 3.0 * step
        fed = Box(x, 0, x + 80, 80)
        cur = tr.update([_det(fed.left, fed.top, fed.right, fed.bottom)])[0]
        assert cur.track_id == prev.track_id
        assert cur.box.as_tuple() == pytest.approx(prev.box.blend(fed, alpha).as_tuple())
        assert prev.box.left <= cur.box.left <= fed.left
        prev = cur


def test_unmatched_track_is_evicted_after_max_missed_and_id_not_reused():
    tr = IouTracker(max_missed=5)
    for _ in range(3):
        out = tr.update([_det(100, 100, 180, 180)])
    assert [d.track_id for d in out] == [1]

    for _ in range(5):
        assert [d.track_id for d in tr.update([])] == [1]
    assert tr.update([]) == []

    again = tr.update([_det(100, 100, 180, 180)])
    assert [d.track_id for d in again] == [2]


def test_separated_objects_do_not_merge_or_swap():
    tr = IouTracker()
    a = _det(0, 0, 80, 80, 0.9)
    b = _det(400, 400, 480, 480, 0.8)
    first = {d.box.left: d.track_id for d in tr.update([a, b])}
    assert len(set(first.values())) == 2

    for i in range(5):
        dx = float(i)
        a_i = _det(dx, 0, 80 + dx, 80, 0.7)
        b_i = _det(400 + dx, 400, 480 + dx, 480, 0.95)
        out = tr.update([b_i, a_i] if i % 2 else [a_i, b_i])
        ids = {("a" if d.box.left < 200 else "b"): d.track_id for d in out}
        assert ids == {"a": first[0.0], "b": first[400.0]}


def test_higher_score_detection_claims_contested_track():
    tr = IouTracker(ema_alpha=1.0)
    tr.update([_det(0, 0, 100, 100)])
    weak = _det(10, 0, 110, 100, 0.6)
    strong = _det(0, 0, 100, 100, 0.9)
    out = tr.update([weak, strong])
    by_id = {d.track_id: d for d in out}
    assert by_id[1].box == strong.box
    assert by_id[2].box == weak.box


def test_score_decays_slowly_and_rises_immediately():
    tr = IouTracker(score_decay=0.6)
    tr.update([_det(0, 0, 100, 100, 0.9)])
    assert tr.update([_det(0, 0, 100, 100, 0.3)])[0].score == pytest.approx(0.54)
    assert tr.update([_det(0, 0, 100, 100, 0.95)])[0].score == pytest.approx(0.95)


def test_max_tracks_caps_new_tracks():
    tr = IouTracker(max_tracks=2)
    dets = [_det(0, 0, 10, 10, 0.5), _det(100, 0, 110, 10, 0.9), _det(200, 0, 210, 10, 0.7)]
    out = tr.update(dets)
    assert len(out) == 2
    assert [d.score for d in out] == [0.9, 0.7]


def test_output_sorted_by_score():
    tr = IouTracker()
    out = tr.update([_det(0, 0, 10, 10, 0.4), _det(100, 0, 110, 10, 0.8), _det(200, 0, 210, 10, 0.6)])
    assert [d.score for d in out] == [0.8, 0.6, 0.4]


def test_constant_stream_converges_to_fed_box():
    tr = IouTracker()
    fed = Box(120.0, 40.0, 200.0, 130.0)
    ids = set()
    for _ in range(10):
        out = tr.update([Detection(fed, "postit", 0.8)])
        ids.add(out[0].track_id)
        assert out[0].box.as_tuple() == pytest.approx(fed.as_tuple())
    assert ids == {1}


def test_reset_drops_tracks_but_keeps_ids_unique():
    tr = IouTracker()
    tr.update([_det(0, 0, 10, 10)])
    tr.reset()
    assert tr.tracks == []
    assert tr.update([_det(0, 0, 10, 10)])[0].track_id == 2


def test_snapshot_is_detached_from_tracker_state():
    tr = IouTracker()
    snap = tr.update([_det(0, 0, 100, 100)])
    snap.clear()
    assert len(tr.tracks) == 1
    assert iou(tr.tracks[0].box, Box(0, 0, 100, 100)) == 1.0

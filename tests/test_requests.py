import warnings

from signbridge.backend.db import requests as rq

import hands


def test_finish_session_stamps_end_date(db):
    sign = rq.save_sample(db, {"sign_name": "a", "landmarks": hands.as_dicts(hands.fist())})
    s = rq.start_session(db, learner_id=1)
    rq.record_attempt(db, s, sign.id, 80.0)

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        s = rq.finish_session(db, s)

    assert s.end_date is not None
    assert s.total_score == 80.0
    assert not [w for w in caught if "utcnow" in str(w.message)]


def test_highest_scores_ignore_sign_name_case(db):
    upper = rq.save_sample(db, {"sign_name": "A", "landmarks": hands.as_dicts(hands.fist())})
    lower = rq.save_sample(db, {"sign_name": "a", "landmarks": hands.as_dicts(hands.fist())})
    s = rq.start_session(db, learner_id=2)
    rq.record_attempt(db, s, upper.id, 40.0)
    rq.record_attempt(db, s, lower.id, 70.0)

    stats = rq.learner_statistics(db, 2)
    assert stats["highest_scores"] == [{"sign_name": "a", "max_score": 70.0}]

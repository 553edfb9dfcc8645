"""Tests for hand gesture classification."""

import numpy as np
import pytest

from landmark_engine.errors import LandmarkCountError
from landmark_engine.gestures import (
    DEFAULT_RULES,
    FingerState,
    GestureLabel,
    GestureRule,
    HandGestureClassifier,
    finger_states,
    pinch_distance,
)
from landmark_engine.landmarks import HandLandmark, Handedness, LandmarkSet

from helpers import make_body, make_hand, make_hand_array


@pytest.fixture
def classifier():
    return HandGestureClassifier()


class TestFingerStates:
    def test_all_curled(self):
        states = finger_states(make_hand(), Handedness.RIGHT)
        assert states.as_tuple() == (False, False, False, False, False)

    def test_index_and_middle(self):
        states = finger_states(make_hand(index=True, middle=True), Handedness.RIGHT)
        assert states.as_tuple() == (False, True, True, False, False)


class TestClassifier:
    @pytest.mark.parametrize("fingers,expected", [
        (dict(thumb=True, index=True, middle=True, ring=True, pinky=True), GestureLabel.OPEN_PALM),
        (dict(), GestureLabel.FIST),
        (dict(thumb=True), GestureLabel.THUMBS_UP),
        (dict(index=True), GestureLabel.POINTING),
        (dict(index=True, middle=True), GestureLabel.PEACE),
    ])
    def test_right_hand(self, classifier, fingers, expected):
        assert classifier.classify(make_hand(**fingers), Handedness.RIGHT) is expected

    @pytest.mark.parametrize("fingers,expected", [
        (dict(thumb=True, index=True, middle=True, ring=True, pinky=True), GestureLabel.OPEN_PALM),
        (dict(thumb=True), GestureLabel.THUMBS_UP),
        (dict(), GestureLabel.FIST),
    ])
    def test_left_hand(self, classifier, fingers, expected):
        hand = make_hand(mirror=True, **fingers)
        assert classifier.classify(hand, Handedness.LEFT) is expected

    def test_handedness_flips_thumb(self, classifier):
        # A right hand's extended thumb reads as curled under the left rule
        hand = make_hand(thumb=True)
        assert classifier.classify(hand, Handedness.LEFT) is GestureLabel.FIST

    def test_unmatched_is_unknown(self, classifier):
        hand = make_hand(index=True, pinky=True)
        assert classifier.classify(hand, Handedness.RIGHT) is GestureLabel.UNKNOWN

    def test_pinch_beats_everything(self, classifier):
        hand = make_hand(thumb=True, index=True, middle=True, ring=True, pinky=True, pinch=True)
        assert classifier.classify(hand, Handedness.RIGHT) is GestureLabel.PINCH

    def test_coincident_tips_pinch(self, classifier):
        arr = make_hand_array(index=True, middle=True)
        arr[HandLandmark.THUMB_TIP] = arr[HandLandmark.INDEX_TIP]
        hand = LandmarkSet.hand(arr)
        assert pinch_distance(hand) == 0.0
        assert classifier.classify(hand) is GestureLabel.PINCH

    def test_pinch_threshold_is_strict(self):
        arr = make_hand_array(index=True)
        ix, iy, _ = arr[HandLandmark.INDEX_TIP]
        arr[HandLandmark.THUMB_TIP] = [ix - 0.04, iy, 0.0]
        hand = LandmarkSet.hand(arr)
        assert HandGestureClassifier(pinch_threshold=0.05).classify(hand) is GestureLabel.PINCH
        assert HandGestureClassifier(pinch_threshold=0.03).classify(hand) is not GestureLabel.PINCH

    def test_pinch_ignores_depth(self, classifier):
        arr = make_hand_array(pinch=True)
        arr[HandLandmark.THUMB_TIP, 2] = 0.5
        assert classifier.classify(LandmarkSet.hand(arr)) is GestureLabel.PINCH

    def test_default_handedness_is_right(self, classifier):
        assert classifier.classify(make_hand(thumb=True)) is GestureLabel.THUMBS_UP

    def test_body_landmarks_rejected(self, classifier):
        with pytest.raises(LandmarkCountError):
            classifier.classify(make_body())

    def test_deterministic(self, classifier):
        hand = make_hand(index=True, middle=True)
        results = {classifier.classify(hand) for _ in range(10)}
        assert results == {GestureLabel.PEACE}

    def test_random_hands_always_labelled(self, classifier):
        rng = np.random.RandomState(3)
        for _ in range(100):
            hand = LandmarkSet.hand(rng.uniform(0, 1, size=(21, 3)))
            assert isinstance(classifier.classify(hand), GestureLabel)


class TestRules:
    def test_rule_order(self):
        labels = [r.label for r in DEFAULT_RULES]
        assert labels == [
            GestureLabel.THUMBS_UP,
            GestureLabel.OPEN_PALM,
            GestureLabel.FIST,
            GestureLabel.POINTING,
            GestureLabel.PEACE,
        ]

    def test_custom_rules(self):
        rock = GestureRule(
            GestureLabel.PEACE,
            index=FingerState.EXTENDED,
            middle=FingerState.CURLED,
            pinky=FingerState.EXTENDED,
        )
        classifier = HandGestureClassifier(rules=(rock,))
        assert classifier.rules == (rock,)
        assert classifier.classify(make_hand(index=True, pinky=True)) is GestureLabel.PEACE
        assert classifier.classify(make_hand()) is GestureLabel.UNKNOWN

    def test_rule_to_dict(self):
        d = DEFAULT_RULES[0].to_dict()
        assert d["label"] == "thumbs_up"
        assert d["fingers"]["thumb"] == "extended"

    def test_label_metadata(self):
        assert GestureLabel.PINCH.display_name == "Pinch"
        assert GestureLabel.PEACE.emoji == "✌️"

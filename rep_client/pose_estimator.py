# rep_client/pose_estimator.py

import os
from typing import Optional

os.environ['TF_CPP_MIN_LOG_LEVEL'] = '3'

import cv2
import mediapipe as mp

from .pose_utils import JointFrame, Point2D

mp_pose = mp.solutions.pose

# MediaPipe landmark indices, left side of the body
LANDMARK_INDEX = {
    "shoulder": 11,
    "elbow": 13,
    "wrist": 15,
    "hip": 23,
    "knee": 25,
    "ankle": 27,
}


class PoseEstimator:
    def __init__(self, min_detection_confidence=0.5, min_tracking_confidence=0.5):
        self.pose = mp_pose.Pose(
            static_image_mode=False,
            model_complexity=1,
            enable_segmentation=False,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self.last_landmarks = None

    def process(self, frame_bgr) -> Optional[JointFrame]:
        """
        Input: BGR frame from OpenCV.
        Output: JointFrame in pixel space, or None if no person was detected.
        The raw pose_landmarks are kept on `last_landmarks` for drawing.
        """
        h, w, _ = frame_bgr.shape
        rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        results = self.pose.process(rgb)

        self.last_landmarks = results.pose_landmarks
        if not results.pose_landmarks:
            return None

        lm = results.pose_landmarks.landmark

        def pt(idx):
            p = lm[idx]
            return Point2D(p.x * w, p.y * h)

        return JointFrame({name: pt(idx) for name, idx in LANDMARK_INDEX.items()})

    def close(self):
        self.pose.close()

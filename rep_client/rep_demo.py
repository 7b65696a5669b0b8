# rep_client/rep_demo.py

import os
import time
import cv2
import mediapipe as mp
import numpy as np
import requests
import pyttsx3
from threading import Thread
from queue import Queue

from .errors import RepTrackerError
from .exercise_data import EXERCISE_PROFILES, DEFAULT_VARIATION
from .pose_estimator import PoseEstimator
from .pose_utils import SyntheticJointSource
from .rep_logic import ExercisePhase
from .session import ExerciseSession

# MediaPipe drawing helpers
mp_drawing = mp.solutions.drawing_utils
mp_pose = mp.solutions.pose

# Backend (FastAPI) endpoint
BACKEND_URL = os.getenv("REP_BACKEND_URL", "http://127.0.0.1:8000/analyze_rep")

WINDOW_NAME = "Push Up Rep Tracker"

# ---------- Queue for background LLM calls ----------
rep_queue: Queue = Queue()     # completed reps to send to backend

# Global overlay from last LLM response
last_coaching_message: str = ""

PHASE_COLORS = {
    ExercisePhase.DOWN: (0, 200, 0),
    ExercisePhase.UP: (0, 200, 0),
    ExercisePhase.TRANSITIONING: (255, 255, 255),
    ExercisePhase.NO_SIGNAL: (0, 0, 255),
}

SKELETON = [
    ("shoulder", "elbow"), ("elbow", "wrist"),
    ("shoulder", "hip"), ("hip", "knee"), ("knee", "ankle"),
]


def choose_variation():
    variations = list(EXERCISE_PROFILES)
    print("Select push-up variation:")
    for i, key in enumerate(variations, start=1):
        print(f"  {i}. {EXERCISE_PROFILES[key].title}")
    choice = input(f"Enter 1-{len(variations)}: ").strip()
    try:
        variation = variations[int(choice) - 1]
    except (ValueError, IndexError):
        variation = DEFAULT_VARIATION
    profile = EXERCISE_PROFILES[variation]
    print(f"\nYou selected: {profile.title}")
    print(profile.description)
    for tip in profile.tips:
        print(f"  - {tip}")
    print()
    return variation


def choose_source():
    choice = input("Joint source: 1. Camera  2. Synthetic  [1]: ").strip()
    return "synthetic" if choice == "2" else "camera"


# ---------- TTS helper (per-message thread) ----------

def speak_message(text: str):
    """
    Create a fresh pyttsx3 engine for THIS message only.
    Runs in its own thread so the camera loop never blocks.
    """
    if not text:
        return
    try:
        engine = pyttsx3.init()
        engine.setProperty("rate", 165)
        engine.say(text)
        engine.runAndWait()
        engine.stop()
    except Exception as e:
        print("TTS error:", e)


# ---------- Background LLM worker ----------

def llm_worker():
    """
    Runs in a background thread.
    Reads completed rep summaries from rep_queue,
    posts them to the coaching backend,
    updates last_coaching_message and speaks it.
    """
    global last_coaching_message

    while True:
        rep_summary = rep_queue.get()
        try:
            resp = requests.post(BACKEND_URL, json=rep_summary, timeout=2.0)
            if resp.status_code == 200:
                msg = resp.json().get("message", "")
                if msg:
                    last_coaching_message = msg
                    Thread(target=speak_message, args=(msg,), daemon=True).start()
            else:
                print("LLM worker backend error:", resp.status_code, resp.text)
        except requests.RequestException as e:
            print("LLM worker exception:", e)
        finally:
            rep_queue.task_done()


def draw_skeleton(image, frame):
    for start, end in SKELETON:
        p1, p2 = frame[start], frame[end]
        cv2.line(image, (int(p1.x), int(p1.y)), (int(p2.x), int(p2.y)), (0, 0, 255), 3)
    for p in frame.values():
        cv2.circle(image, (int(p.x), int(p.y)), 8, (0, 255, 0), -1)


def draw_overlay(image, session, result):
    angle_text = "--" if np.isnan(result.angle_degrees) else f"{round(result.angle_degrees)}"
    cv2.putText(image, f"Angle: {angle_text} deg", (20, 30),
                cv2.FONT_HERSHEY_SIMPLEX, 0.7, (200, 255, 200), 2)
    cv2.putText(image, f"Reps: {result.rep_count}", (20, 60),
                cv2.FONT_HERSHEY_SIMPLEX, 0.9, (0, 255, 0), 2)
    cv2.putText(image, f"Time: {session.format_elapsed()}", (20, 90),
                cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 255, 255), 2)
    cv2.putText(image, result.feedback, (20, 120),
                cv2.FONT_HERSHEY_SIMPLEX, 0.6, PHASE_COLORS[result.phase], 2)


def main():
    # 1) Choose variation and joint source
    variation = choose_variation()
    source = choose_source()

    synthetic = None
    cap = None
    if source == "camera":
        cap = cv2.VideoCapture(0)
        if not cap.isOpened():
            print("Error: Could not open camera.")
            return
        pose_estimator = PoseEstimator()
    else:
        synthetic = SyntheticJointSource(640, 480)
        pose_estimator = None

    # 2) Session + background LLM worker
    session = ExerciseSession("pushup", variation)
    Thread(target=llm_worker, daemon=True).start()

    # 3) 5-second countdown before tracking
    countdown_seconds = 5
    countdown_start = time.time()
    countdown_done = False

    print(f"Get into position... starting in {countdown_seconds} seconds.")

    try:
        while True:
            if cap is not None:
                ret, frame = cap.read()
                if not ret:
                    break
            else:
                frame = np.zeros((synthetic.height, synthetic.width, 3), dtype=np.uint8)

            display_frame = frame.copy()

            # ---------- PHASE 1: Countdown ----------
            if not countdown_done:
                remaining = countdown_seconds - int(time.time() - countdown_start)
                if remaining > 0:
                    cv2.putText(display_frame, f"Get ready: {remaining}", (60, 100),
                                cv2.FONT_HERSHEY_SIMPLEX, 1.2, (0, 255, 255), 3)
                else:
                    countdown_done = True
                    session.start()
                    print("Go! Tracking reps now.")

                cv2.imshow(WINDOW_NAME, display_frame)
                if cv2.waitKey(1) & 0xFF == ord('q'):
                    break
                continue

            # ---------- PHASE 2: Joints + rep tracking ----------
            if pose_estimator is not None:
                joints = pose_estimator.process(frame)
                if pose_estimator.last_landmarks:
                    mp_drawing.draw_landmarks(
                        display_frame,
                        pose_estimator.last_landmarks,
                        mp_pose.POSE_CONNECTIONS,
                    )
            else:
                joints = synthetic.frame_at(time.time())
                draw_skeleton(display_frame, joints)

            if joints is not None:
                try:
                    result = session.tick(joints)
                except RepTrackerError as e:
                    print("Tick skipped:", e)
                else:
                    draw_overlay(display_frame, session, result)

                    if result.completed_rep:
                        print(f"=== REP COMPLETED (rep_id={result.completed_rep['rep_id']}) ===")
                        print("Rep summary:", result.completed_rep)
                        # Only send odd reps to backend + voice
                        if result.completed_rep["rep_id"] % 2 == 1:
                            rep_queue.put(result.completed_rep)   # returns instantly

            # ---------- Coaching message overlay ----------
            if last_coaching_message:
                cv2.putText(display_frame, last_coaching_message,
                            (20, display_frame.shape[0] - 30),
                            cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 200, 255), 2)

            cv2.imshow(WINDOW_NAME, display_frame)
            if cv2.waitKey(1) & 0xFF == ord('q'):
                break
    finally:
        session.stop()
        print(f"Session finished: {session.rep_count} reps in {session.format_elapsed()}")
        if cap is not None:
            cap.release()
        if pose_estimator is not None:
            pose_estimator.close()
        cv2.destroyAllWindows()


if __name__ == "__main__":
    main()

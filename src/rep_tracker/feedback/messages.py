from .events import Feedback


# --- Feedback Templates ---
class FeedbackGenerator:
    @staticmethod
    def knees_too_close():
        return Feedback("Knees too close together, widen your stance", is_critical=True)

    @staticmethod
    def leaning_forward():
        return Feedback("Leaning too far forward, keep your back straighter", is_critical=True)

    @staticmethod
    def sagging_back():
        return Feedback("Keep your back straight, don't let your hips sag", is_critical=True)

    @staticmethod
    def bend_front_knee(target: float):
        return Feedback(f"Bend your front knee more, down to {int(target)} degrees", is_critical=False)

    @staticmethod
    def rep_too_fast(exercise: str):
        return Feedback(f"{exercise} too fast, slow down", is_critical=True)

    @staticmethod
    def rep_too_slow(exercise: str):
        return Feedback(f"{exercise} too slow", is_critical=False)

    @staticmethod
    def good_pace():
        return Feedback("Good pace! Keep going", is_critical=False)

    @staticmethod
    def move_faster():
        return Feedback("Try to move faster", is_critical=False)

    @staticmethod
    def hold_target_reached():
        return Feedback("Great! Minimum hold time reached, keep going!", is_critical=False)

    @staticmethod
    def plank_back():
        return Feedback("Keep your back straighter during the plank", is_critical=True)

    @staticmethod
    def plank_elbows(target: float):
        return Feedback(f"Watch your elbow angle, it should be about {int(target)} degrees", is_critical=True)

    @staticmethod
    def anomalies(descriptions):
        return Feedback(f"Anomalies detected: {', '.join(descriptions)}", is_critical=True)

from .simulated import SimulatedAnchor, SimulatedCamera, SimulatedFaceTracker, SimulatedFrame

__all__ = ["SimulatedAnchor", "SimulatedCamera", "SimulatedFaceTracker", "SimulatedFrame"]

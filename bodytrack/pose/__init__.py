"""
Pose estimation utilities.

This package defines the ordered COCO-17 PoseFrame and provider adapters
(e.g., MediaPipe Pose) so the tracking pipeline never sees model objects.
"""

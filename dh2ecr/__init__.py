"""
dh2ecr — Mirror Docker Hub images into Amazon ECR.
"""

__version__ = "0.1.0"

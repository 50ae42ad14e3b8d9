"""
Destination registry (Amazon ECR) control plane.
"""

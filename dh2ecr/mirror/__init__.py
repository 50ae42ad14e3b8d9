"""
Mirror execution — move planned images from Docker Hub into ECR.
"""

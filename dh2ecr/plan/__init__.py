"""
Mirror plan — which Docker Hub images go into which ECR repository.
"""

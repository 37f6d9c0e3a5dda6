"""aeonian - versioned static site deployments to S3 and CloudFront."""

__version__ = "0.3.0"

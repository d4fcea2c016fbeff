from .review_source import ReviewSource
from .business_client import GoogleBusinessClient

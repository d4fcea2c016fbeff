from .profile_repository import ProfileRepository

"""Test settings for OpenClass.

Fast hashing, in-memory mail and channel layer, temporary upload root.
"""
from .base import *  # noqa
import tempfile


DEBUG = False
SECRET_KEY = "test-insecure-key"
JWT_SECRET = "test-jwt-secret-with-enough-length-for-hs256"

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
CHANNEL_LAYERS = {"default": {"BACKEND": "channels.layers.InMemoryChannelLayer"}}
MEDIA_ROOT = tempfile.mkdtemp(prefix="openclass-uploads-")
SKIP_EMAIL_VERIFICATION = False

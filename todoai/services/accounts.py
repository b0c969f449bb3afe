"""Service for creating users and looking them up by credentials."""

from __future__ import annotations

import logging

from todoai.domain.errors import EmailTaken, InvalidCredentials
from todoai.domain.models import User
from todoai.repos.memory import UserRepository

logger = logging.getLogger(__name__)


def signup(user_repo: UserRepository, name: str, email: str, password: str) -> User:
    user = User(name=name, email=email, password=password)
    if not user_repo.add_if_email_free(user):
        raise EmailTaken(email)
    logger.info("created user %s", user.id)
    return user


def signin(user_repo: UserRepository, email: str, password: str) -> User:
    user = user_repo.find_by_credentials(email, password)
    if user is None:
        logger.info("failed sign-in for %s", email)
        raise InvalidCredentials()
    return user

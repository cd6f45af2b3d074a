from fastapi import status
from .base import build_response


def success_response(message: str = None, data=None):
    return build_response(status.HTTP_200_OK, "success", message=message, data=data)


def data_response(data=None):
    return build_response(status.HTTP_200_OK, status="success", data=data)


def created_response(data=None):
    return build_response(status.HTTP_201_CREATED, status="success", data=data)


def empty_response():
    return build_response(status.HTTP_204_NO_CONTENT)

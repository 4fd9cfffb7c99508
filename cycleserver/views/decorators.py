"""
Decorators
-------------------------
"""
from functools import wraps
from inspect import isawaitable
from typing import Union, Any, Dict, Tuple

from aiohttp import web
from aiohttp.web_request import Request
from aiohttp.web_urldispatcher import View

from cycleserver.serializer import JSendStatus, JSendSchema


def resolve_match_map(request: Request, match_map) -> Dict[str, Any]:
    resolved_matches = {}
    errors = []

    for key, value in match_map.items():
        if isinstance(value, str):
            value = (value, int)

        if not isinstance(value, tuple):
            raise TypeError(f"match_getter incorrectly configured (doesn't support {type(value)})")

        param = request.match_info.get(value[0])
        try:
            resolved_matches[key] = value[1](param)
        except (ValueError, TypeError):
            errors.append(f'Could not convert url parameter "{param}" to expected type {value[1].__name__}.')

    if errors:
        raise ValueError(*errors)
    return resolved_matches


def match_getter(getter_function, injection_parameter: str, **match_map: Union[str, Tuple[str, type]]):
    """
    Automatically fetches and includes an item, or 404's if it doesn't exist.

    .. code-block:: python

        # example usage
        @match_getter(get_booth, "booth", booth_id="id")
        async def get(self, booth: Booth)
            return web.json_response(data=booth.serialize())

    :param getter_function: The function to fetch the item from.
    :param injection_parameter: The name of the parameter to pass the object as.
    :param match_map: Associates a kwarg on the ``getter_function`` to a url variable, and
        optionally the type to convert it to (the default being :class:`int`).
    :return: A decorator that wraps the response and passes in the object.
    """

    def attach_instance(original_function):

        @wraps(original_function)
        async def new_func(self: View, **kwargs):
            try:
                params = resolve_match_map(self.request, match_map)
            except ValueError as error:
                response = {
                    "status": JSendStatus.FAIL,
                    "data": {
                        "message": "Errors with your request.",
                        "errors": list(error.args)
                    }
                }
                raise web.HTTPBadRequest(text=JSendSchema().dumps(response), content_type='application/json')

            item = getter_function(**params)
            if isawaitable(item):
                item = await item

            if item is None:
                response = {
                    "status": JSendStatus.FAIL,
                    "data": {
                        "message": f'Could not find {injection_parameter} with the given params.',
                        "reason": f"{injection_parameter}_not_found",
                        "params": params
                    }
                }
                raise web.HTTPNotFound(text=JSendSchema().dumps(response), content_type='application/json')

            return await original_function(self, **kwargs, **{injection_parameter: item})

        return new_func

    return attach_instance

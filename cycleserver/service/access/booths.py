"""
Booths
======

Handles the CRUD for booths. Booths may be moved while they have
units, but the move is logged so that it can be audited later. They
may not be deleted until all their units are gone.
"""
from typing import Optional, List

from tortoise.exceptions import IntegrityError
from tortoise.functions import Count

from cycleserver import logger
from cycleserver.models import Booth, Unit
from cycleserver.models.booth import DEFAULT_RADIUS, MINIMUM_RADIUS
from cycleserver.service.exceptions import DuplicateName, InvalidLocation, InvalidName, BoothInUse
from cycleserver.service.geofence import validate_coordinates


def validate_booth_location(latitude: float, longitude: float, radius: float):
    """
    :raises InvalidLocation: If the center is off the globe or the radius is too small.
    """
    validate_coordinates(latitude, longitude)
    if not radius >= MINIMUM_RADIUS:
        raise InvalidLocation(f"Radius {radius} must be at least {MINIMUM_RADIUS} meters.")


def validate_booth_name(name: str) -> str:
    """
    Strips the surrounding whitespace from a booth name.

    :raises InvalidName: If nothing is left after stripping.
    """
    name = name.strip()
    if not name:
        raise InvalidName()
    return name


async def get_booths(*, name: str = None, with_unit_count=False) -> List[Booth]:
    """
    Gets all the booths, in the order they were created.

    :param name: A name to match against. Must match perfectly.
    :param with_unit_count: Annotates each booth with its ``unit_count``.
    """
    query = Booth.all()

    if name is not None:
        query = query.filter(name=name)
    if with_unit_count:
        query = query.annotate(unit_count=Count("units"))

    return await query.order_by("id")


async def get_booth(booth_id: int) -> Optional[Booth]:
    return await Booth.filter(id=booth_id).first()


async def get_booth_by_name(name: str) -> Optional[Booth]:
    return await Booth.filter(name=name.strip()).first()


async def create_booth(name: str, latitude: float, longitude: float, radius: float = DEFAULT_RADIUS) -> Booth:
    """
    Creates a new booth.

    :raises InvalidName: If the name is blank.
    :raises InvalidLocation: If the location or radius is invalid.
    :raises DuplicateName: If a booth with the name exists.
    """
    name = validate_booth_name(name)
    validate_booth_location(latitude, longitude, radius)

    try:
        booth = await Booth.create(name=name, latitude=latitude, longitude=longitude, radius=radius)
    except IntegrityError:
        raise DuplicateName(f"A booth named {name} already exists.")

    logger.info("Created booth %s", booth)
    return booth


async def update_booth(
    booth: Booth, *,
    name: str = None, latitude: float = None, longitude: float = None, radius: float = None
) -> Booth:
    """
    Updates the given fields on a booth.

    :raises InvalidName: If the new name is blank.
    :raises InvalidLocation: If the new location or radius is invalid.
    :raises DuplicateName: If the new name is taken.
    """
    changes = {
        key: value for key, value in
        (("name", validate_booth_name(name) if name is not None else None),
         ("latitude", latitude), ("longitude", longitude), ("radius", radius))
        if value is not None and value != getattr(booth, key)
    }

    if not changes:
        return booth

    validate_booth_location(
        changes.get("latitude", booth.latitude),
        changes.get("longitude", booth.longitude),
        changes.get("radius", booth.radius),
    )

    if {"latitude", "longitude", "radius"} & changes.keys():
        unit_count = await Unit.filter(booth_id=booth.id).count()
        if unit_count:
            logger.warning(
                "Geofence of booth %s (%s) changed from (%s, %s) r=%sm to (%s, %s) r=%sm with %s units attached",
                booth.id, booth.name, booth.latitude, booth.longitude, booth.radius,
                changes.get("latitude", booth.latitude), changes.get("longitude", booth.longitude),
                changes.get("radius", booth.radius), unit_count
            )

    previous = {key: getattr(booth, key) for key in changes}
    booth.update_from_dict(changes)

    try:
        await booth.save()
    except IntegrityError:
        booth.update_from_dict(previous)
        raise DuplicateName(f"A booth named {changes['name']} already exists.")

    return booth


async def delete_booth(booth: Booth):
    """
    Deletes a booth.

    :raises BoothInUse: If any units still reference the booth.
    """
    if await Unit.filter(booth_id=booth.id).exists():
        raise BoothInUse(f"Booth {booth.name} still has units. Remove them first.")

    await booth.delete()
    logger.info("Deleted booth %s", booth)

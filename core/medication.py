"""
Daily medication schedule.

Static reference data; the only variable is whether today is Sunday,
which adds the weekly supplement to the night slot.
"""
from typing import List

from core.models import MedicationItem, MedicationSlot, MedicationType


def medication_schedule(is_sunday: bool) -> List[MedicationSlot]:
    night_items = [MedicationItem("Minoxidil", MedicationType.SCALP)]
    if is_sunday:
        night_items.append(MedicationItem("Uprise D3", MedicationType.PILL))

    return [
        MedicationSlot(
            id="m1",
            time="05:00 AM",
            note="Empty Stomach",
            items=[MedicationItem("Neksium 40", MedicationType.PILL)],
        ),
        MedicationSlot(
            id="m2",
            time="08:00 AM",
            note="Post-Bath",
            items=[
                MedicationItem("Evion", MedicationType.PILL),
                MedicationItem("Alive Forte", MedicationType.PILL),
                MedicationItem("Bilypsa", MedicationType.PILL),
            ],
        ),
        MedicationSlot(
            id="m3",
            time="08:30 PM",
            note="Sunday Stack" if is_sunday else "Night",
            items=night_items,
        ),
    ]

"""Known item catalogue with display names and packaged default positions."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class KnownItem:
    """A vanilla item the mod ships a default position for."""

    internal_name: str
    display_name: str
    default_position: str = ""


def _item(internal_name: str, display_name: str, default_position: str = "") -> KnownItem:
    return KnownItem(internal_name, display_name, default_position)


KNOWN_ITEMS = (
    # Scrap with a dedicated floor slot
    _item("Hairdryer", "Hairdryer", "-1.96,2,-5.26"),
    _item("Hairbrush", "Hairbrush", "1.75,2,-5.96"),
    _item("EasterEgg", "Easter egg", "-6.32,2,-7.1"),
    _item("Mug", "Coffee mug", "-2.45,2,-6.87"),
    _item("Dentures", "Teeth", "-3.14,2,-5.85"),
    _item("FancyLamp", "Fancy lamp", "1.62,2,-6.73"),
    _item("ComedyMask", "Comedy", "-3.92,2,-7"),
    _item("FancyRing", "Golden cup", "-3.33,2,-6.91"),
    _item("TragedyMask", "Tragedy", "-4.08,2,-6.46"),
    _item("BinFullOfBottles", "Bottles", "-5.03,2,-7.11"),
    _item("ToyCube", "Toy cube", "-3.48,2,-4.93"),
    _item("FancyGlass", "Fancy glass", "-5.9,2,-4.88"),
    _item("FishTestProp", "Plastic fish", "-6.34,2,-7.7"),
    _item("PerfumeBottle", "Perfume bottle", "-1.25,2,-8.46"),
    _item("Painting", "Painting", "1.29,2,-8.36"),
    _item("Airhorn", "Airhorn", "-0.06,2,-5.52"),
    _item("RedSodaCan", "Red soda", "-1.88,2,-6.16"),
    _item("RubberDucky", "Rubber Ducky", "8.38,2,-6.48"),
    _item("MagnifyingGlass", "Magnifying glass", "-3.93,2,-7.45"),
    _item("Toothpaste", "Toothpaste", "-4.95,2,-7.78"),
    _item("Candy", "Candy", "-3.57,2,-8.46"),
    _item("RedLocustHive", "Hive", "6.32,2,-5.13"),
    _item("TeaKettle", "Tea kettle", "-4.98,2,-6.25"),
    _item("HandBell", "Brass bell", "-4.48,2,-5.54"),
    _item("RobotToy", "Toy robot", "-0.25,2,-8.45"),
    _item("Clownhorn", "Clown horn", "-0.06,2,-5.52"),
    _item("OldPhone", "Old phone", "-1.8,2,-7.05"),
    _item("LaserPointer", "Laser pointer", "-6.34,2,-6.85"),
    _item("Magic7Ball", "Magic 7 ball", "-6.2,2,-6.11"),
    # Bulky scrap stacked in one corner
    _item("StopSign", "Stop sign", "2.86,2,-6.08"),
    _item("YieldSign", "Yield sign", "2.86,2,-6.08"),
    _item("CookieMoldPan", "Cookie mold pan", "2.86,2,-6.08"),
    _item("DiyFlashbang", "Homemade flashbang", "2.86,2,-6.08"),
    _item("PillBottle", "Pill bottle", "2.86,2,-6.08"),
    _item("Dustpan", "Dust pan", "2.86,2,-6.08"),
    _item("SteeringWheel", "Steering wheel", "2.86,2,-6.08"),
    _item("Remote", "Remote", "2.86,2,-6.08"),
    _item("ChemicalJug", "Chemical jug", "2.86,2,-6.08"),
    _item("Flask", "Flask", "2.86,2,-6.08"),
    _item("EnginePart", "Engine part", "2.86,2,-6.08"),
    _item("EggBeater", "Egg beater", "2.86,2,-6.08"),
    _item("BigBolt", "Large axle", "2.86,2,-6.08"),
    _item("MetalSheet", "Metal sheet", "2.86,2,-6.08"),
    _item("WhoopieCushion", "Whoopie cushion", "8.46,2,-7.7"),
    _item("Cog", "Cog", "2.86,2,-6.08"),
    # Items that follow their category default unless configured
    _item("ShotgunItem", "Shotgun", "C"),
    _item("Shovel", "Shovel"),
    _item("FlashlightItem", "Flashlight"),
    _item("ProFlashlight", "Pro-flashlight"),
    _item("WalkieTalkie", "Walkie-talkie"),
    _item("KeyItem", "Key"),
    _item("LockPicker", "Lockpicker"),
    _item("ExtensionLadderItem", "Extension ladder"),
    _item("ZapGun", "Zap gun"),
    _item("StunGrenade", "Stun grenade"),
    _item("SprayPaintItem", "Spray paint"),
    _item("BeltBag", "Belt bag"),
)


__all__ = ["KnownItem", "KNOWN_ITEMS"]

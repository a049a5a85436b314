#!/usr/bin/env python3
"""
Generate a sample Space Engineers installation for testing purposes.
This creates a minimal but valid SE-like Content/Data tree plus one workshop mod,
laid out like a Steam library.
"""

import sys
from pathlib import Path

MOD_ID = 1234567
UNKNOWN_MOD_ID = 7654321

XML_HEADER = '<?xml version="1.0" encoding="utf-8"?>\n'
DEFINITIONS_OPEN = ('<Definitions xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" '
                    'xmlns:xsd="http://www.w3.org/2001/XMLSchema">\n')


def block(xsi_type, type_id, subtype_id, display_name, size, components, extra="", public=None, has_physics=None):
    """Build a <Definition> element for a CubeBlocks file."""
    component_xml = "\n".join(
        f'      <Component Subtype="{subtype}" Count="{count}" />' for subtype, count in components
    )
    public_xml = f"    <Public>{public}</Public>\n" if public is not None else ""
    physics_xml = f"    <HasPhysics>{has_physics}</HasPhysics>\n" if has_physics is not None else ""
    return f"""  <Definition xsi:type="MyObjectBuilder_{xsi_type}">
    <Id>
      <TypeId>{type_id}</TypeId>
      <SubtypeId>{subtype_id}</SubtypeId>
    </Id>
    <DisplayName>{display_name}</DisplayName>
    <CubeSize>{size}</CubeSize>
    <Components>
{component_xml}
    </Components>
{public_xml}{physics_xml}{extra}  </Definition>
"""


def cube_blocks(*definitions):
    return XML_HEADER + DEFINITIONS_OPEN + "<CubeBlocks>\n" + "".join(definitions) + "</CubeBlocks>\n</Definitions>\n"


def resx(texts):
    entries = "\n".join(
        f'  <data name="{name}" xml:space="preserve">\n    <value>{value}</value>\n  </data>'
        for name, value in texts.items()
    )
    return XML_HEADER + f"<root>\n{entries}\n</root>\n"


def entity_components(*components):
    return XML_HEADER + DEFINITIONS_OPEN + "<EntityComponents>\n" + "".join(components) + "</EntityComponents>\n</Definitions>\n"


def inventory_component(subtype_id, x, y, z, input_constraint=False):
    constraint = ("    <InputConstraint>\n      <Entry Type=\"MyObjectBuilder_Ore\" />\n    </InputConstraint>\n"
                  if input_constraint else "")
    return f"""  <EntityComponent xsi:type="MyObjectBuilder_InventoryComponentDefinition">
    <Id>
      <TypeId>Inventory</TypeId>
      <SubtypeId>{subtype_id}</SubtypeId>
    </Id>
    <Size x="{x}" y="{y}" z="{z}" />
{constraint}  </EntityComponent>
"""


def capacitor_component(subtype_id, capacity, recharge_draw):
    return f"""  <EntityComponent xsi:type="MyObjectBuilder_EntityCapacitorComponentDefinition">
    <Id>
      <TypeId>EntityCapacitorComponent</TypeId>
      <SubtypeId>{subtype_id}</SubtypeId>
    </Id>
    <Capacity>{capacity}</Capacity>
    <RechargeDraw>{recharge_draw}</RechargeDraw>
  </EntityComponent>
"""


SE_TEXTS = {
    "DisplayName_Item_SteelPlate": "Steel Plate",
    "DisplayName_Item_Motor": "Motor",
    "DisplayName_Item_PowerCell": "Power Cell",
    "DisplayName_Block_Battery": "Battery",
    "DisplayName_Block_LargeThrust": "Large Ion Thruster",
    "DisplayName_Block_LargeHydrogenThrust": "Large Hydrogen Thruster",
    "DisplayName_Block_SmallAtmosphericThrust": "Small Atmospheric Thruster",
    "DisplayName_Block_LargeContainer": "Large Cargo Container",
    "DisplayName_Block_OreContainer": "Ore Bin",
    "DisplayName_Block_Thrust10": "Thruster 10",
    "DisplayName_Block_Thrust2": "Thruster 2",
}

MOD_TEXTS = {
    "DisplayName_Mod_PropLarge": "Prop Large",
    # Overrides the game's text
    "DisplayName_Block_Battery": "Battery Mk1",
}


def _se_cube_blocks():
    power = cube_blocks(
        block("BatteryBlockDefinition", "BatteryBlock", "LargeBlockBatteryBlock", "DisplayName_Block_Battery", "Large",
              [("SteelPlate", 40), ("PowerCell", 80), ("SteelPlate", 40)],
              "    <MaxStoredPower>3</MaxStoredPower>\n"
              "    <RequiredPowerInput>12</RequiredPowerInput>\n"
              "    <MaxPowerOutput>12</MaxPowerOutput>\n"),
        block("HydrogenEngineDefinition", "HydrogenEngine", "LargeHydrogenEngine", "Hydrogen Engine", "Large",
              [("SteelPlate", 100)],
              "    <FuelCapacity>500000</FuelCapacity>\n"
              "    <MaxPowerOutput>5</MaxPowerOutput>\n"),
        block("ReactorDefinition", "Reactor", "LargeBlockLargeGenerator", "Large Reactor", "Large",
              [("SteelPlate", 1000)],
              "    <MaxPowerOutput>300</MaxPowerOutput>\n"
              "    <FuelProductionToCapacityMultiplier>7200</FuelProductionToCapacityMultiplier>\n"),
        block("JumpDriveDefinition", "JumpDrive", "LargeJumpDrive", "Jump Drive", "Large",
              [("SteelPlate", 60), ("PowerCell", 120)],
              "    <PowerNeededForJump>3</PowerNeededForJump>\n"
              "    <RequiredPowerInput>32</RequiredPowerInput>\n"
              "    <PowerEfficiency>0.8</PowerEfficiency>\n"
              "    <MaxJumpDistance>2000000</MaxJumpDistance>\n"
              "    <MaxJumpMass>1250000</MaxJumpMass>\n"),
        block("WeaponBlockDefinition", "SmallMissileLauncher", "LargeRailgun", "Large Railgun", "Large",
              [("SteelPlate", 300)]),
        block("WeaponBlockDefinition", "LargeMissileTurret", "LargeMissileTurret", "Missile Turret", "Large",
              [("SteelPlate", 20)]),
    )
    thrusters = cube_blocks(
        block("ThrustDefinition", "Thrust", "LargeBlockLargeThrust", "DisplayName_Block_LargeThrust", "Large",
              [("SteelPlate", 150), ("Motor", 1000)],
              "    <ThrusterType>Ion</ThrusterType>\n"
              "    <ForceMagnitude>4320000</ForceMagnitude>\n"
              "    <MaxPowerConsumption>33.6</MaxPowerConsumption>\n"
              "    <MinPowerConsumption>0.000002</MinPowerConsumption>\n"
              "    <MinPlanetaryInfluence>0</MinPlanetaryInfluence>\n"
              "    <MaxPlanetaryInfluence>1</MaxPlanetaryInfluence>\n"
              "    <EffectivenessAtMinInfluence>1</EffectivenessAtMinInfluence>\n"
              "    <EffectivenessAtMaxInfluence>0.3</EffectivenessAtMaxInfluence>\n"),
        block("ThrustDefinition", "Thrust", "LargeBlockLargeHydrogenThrust", "DisplayName_Block_LargeHydrogenThrust",
              "Large", [("SteelPlate", 150)],
              "    <FuelConverter>\n"
              "      <FuelId>\n"
              "        <TypeId>GasProperties</TypeId>\n"
              "        <SubtypeId>Hydrogen</SubtypeId>\n"
              "      </FuelId>\n"
              "      <Efficiency>1</Efficiency>\n"
              "    </FuelConverter>\n"
              "    <ThrusterType>Hydrogen</ThrusterType>\n"
              "    <ForceMagnitude>7200000</ForceMagnitude>\n"
              "    <MaxPowerConsumption>6.426</MaxPowerConsumption>\n"
              "    <MinPowerConsumption>0</MinPowerConsumption>\n"),
        block("ThrustDefinition", "Thrust", "SmallBlockSmallAtmosphericThrust",
              "DisplayName_Block_SmallAtmosphericThrust", "Small", [("SteelPlate", 2), ("Motor", 10)],
              "    <ThrusterType>Atmospheric</ThrusterType>\n"
              "    <ForceMagnitude>96000</ForceMagnitude>\n"
              "    <MaxPowerConsumption>0.7</MaxPowerConsumption>\n"
              "    <MinPowerConsumption>0.000001</MinPowerConsumption>\n"
              "    <MinPlanetaryInfluence>0.3</MinPlanetaryInfluence>\n"
              "    <MaxPlanetaryInfluence>1</MaxPlanetaryInfluence>\n"
              "    <EffectivenessAtMinInfluence>0</EffectivenessAtMinInfluence>\n"
              "    <EffectivenessAtMaxInfluence>1</EffectivenessAtMaxInfluence>\n"
              "    <NeedsAtmosphereForInfluence>true</NeedsAtmosphereForInfluence>\n"),
        block("ThrustDefinition", "Thrust", "Thrust10", "DisplayName_Block_Thrust10", "Small",
              [("SteelPlate", 1)],
              "    <ThrusterType>Ion</ThrusterType>\n"
              "    <ForceMagnitude>1000</ForceMagnitude>\n"
              "    <MaxPowerConsumption>0.1</MaxPowerConsumption>\n"
              "    <MinPowerConsumption>0</MinPowerConsumption>\n"),
        block("ThrustDefinition", "Thrust", "Thrust2", "DisplayName_Block_Thrust2", "Small",
              [("SteelPlate", 1)],
              "    <ThrusterType>Ion</ThrusterType>\n"
              "    <ForceMagnitude>1000</ForceMagnitude>\n"
              "    <MaxPowerConsumption>0.1</MaxPowerConsumption>\n"
              "    <MinPowerConsumption>0</MinPowerConsumption>\n"),
        block("ThrustDefinition", "Thrust", "TestThrust", "Debug Thruster", "Large",
              [("SteelPlate", 1)],
              "    <ThrusterType>Ion</ThrusterType>\n"
              "    <ForceMagnitude>1</ForceMagnitude>\n"
              "    <MaxPowerConsumption>0.1</MaxPowerConsumption>\n"
              "    <MinPowerConsumption>0</MinPowerConsumption>\n",
              public="false"),
    )
    utility = cube_blocks(
        block("OxygenGeneratorDefinition", "OxygenGenerator", "LargeBlockOxygenGenerator", "O2/H2 Generator", "Large",
              [("SteelPlate", 120), ("Motor", 5)],
              "    <InventoryMaxVolume>4</InventoryMaxVolume>\n"
              "    <IceConsumptionPerSecond>30</IceConsumptionPerSecond>\n"
              "    <ProducedGases>\n"
              "      <GasInfo>\n"
              "        <Id><TypeId>GasProperties</TypeId><SubtypeId>Oxygen</SubtypeId></Id>\n"
              "        <IceToGasRatio>9</IceToGasRatio>\n"
              "      </GasInfo>\n"
              "      <GasInfo>\n"
              "        <Id><TypeId>GasProperties</TypeId><SubtypeId>Hydrogen</SubtypeId></Id>\n"
              "        <IceToGasRatio>10</IceToGasRatio>\n"
              "      </GasInfo>\n"
              "    </ProducedGases>\n"
              "    <OperationalPowerConsumption>1</OperationalPowerConsumption>\n"
              "    <StandbyPowerConsumption>0.001</StandbyPowerConsumption>\n"),
        block("GasTankDefinition", "OxygenTank", "LargeHydrogenTank", "Hydrogen Tank", "Large",
              [("SteelPlate", 280)],
              "    <StoredGasId><TypeId>GasProperties</TypeId><SubtypeId>Hydrogen</SubtypeId></StoredGasId>\n"
              "    <Capacity>15000000</Capacity>\n"
              "    <OperationalPowerConsumption>1</OperationalPowerConsumption>\n"
              "    <StandbyPowerConsumption>0.001</StandbyPowerConsumption>\n"),
        block("GasTankDefinition", "OxygenTank", "LargeOxygenTank", "Oxygen Tank", "Large",
              [("SteelPlate", 80)],
              "    <StoredGasId><TypeId>GasProperties</TypeId><SubtypeId>Oxygen</SubtypeId></StoredGasId>\n"
              "    <Capacity>100000</Capacity>\n"
              "    <OperationalPowerConsumption>0.001</OperationalPowerConsumption>\n"
              "    <StandbyPowerConsumption>0.000001</StandbyPowerConsumption>\n"),
        block("CargoContainerDefinition", "CargoContainer", "LargeBlockLargeContainer",
              "DisplayName_Block_LargeContainer", "Large", [("SteelPlate", 360), ("Motor", 20)]),
        block("CargoContainerDefinition", "CargoContainer", "LargeBlockOreBin",
              "DisplayName_Block_OreContainer", "Large", [("SteelPlate", 50)]),
        block("ShipConnectorDefinition", "ShipConnector", "Connector", "Connector", "Large",
              [("SteelPlate", 150), ("Motor", 8)],
              '    <Size x="1" y="1" z="2" />\n'),
        block("CockpitDefinition", "Cockpit", "LargeBlockCockpit", "Control Station", "Large",
              [("SteelPlate", 20)]),
        block("CockpitDefinition", "Cockpit", "PassengerSeatLarge", "Passenger Seat", "Large",
              [("SteelPlate", 20)],
              "    <HasInventory>false</HasInventory>\n"),
        block("ShipDrillDefinition", "Drill", "LargeBlockDrill", "Drill", "Large",
              [("SteelPlate", 300), ("Motor", 5)],
              '    <Size x="1" y="1" z="3" />\n'),
        block("MotorSuspensionDefinition", "MotorSuspension", "Suspension3x3", "3x3 Suspension", "Large",
              [("SteelPlate", 25), ("Motor", 20)],
              "    <PropulsionForce>60000</PropulsionForce>\n"
              "    <RequiredPowerInput>0.1</RequiredPowerInput>\n"
              "    <RequiredIdlePowerInput>0.001</RequiredIdlePowerInput>\n"),
        block("LCDPanelsBlockDefinition", "TextPanel", "LargeLCDPanel", "LCD Panel", "Large",
              [("SteelPlate", 1)]),
    )
    return {"CubeBlocks_Power.sbc": power, "CubeBlocks_Thrusters.sbc": thrusters, "CubeBlocks_Utility.sbc": utility}


COMPONENTS = XML_HEADER + DEFINITIONS_OPEN + """<Components>
  <Component>
    <Id><TypeId>Component</TypeId><SubtypeId>SteelPlate</SubtypeId></Id>
    <DisplayName>DisplayName_Item_SteelPlate</DisplayName>
    <Mass>20</Mass>
    <Volume>3</Volume>
  </Component>
  <Component>
    <Id><TypeId>Component</TypeId><SubtypeId>Motor</SubtypeId></Id>
    <DisplayName>DisplayName_Item_Motor</DisplayName>
    <Mass>24</Mass>
    <Volume>8</Volume>
  </Component>
  <Component>
    <Id><TypeId>Component</TypeId><SubtypeId>PowerCell</SubtypeId></Id>
    <DisplayName>DisplayName_Item_PowerCell</DisplayName>
    <Mass>25</Mass>
    <Volume>45</Volume>
  </Component>
</Components>
</Definitions>
"""

GAS_PROPERTIES = XML_HEADER + DEFINITIONS_OPEN + """<GasProperties>
  <Gas>
    <Id><TypeId>GasProperties</TypeId><SubtypeId>Oxygen</SubtypeId></Id>
  </Gas>
  <Gas>
    <Id><TypeId>GasProperties</TypeId><SubtypeId>Hydrogen</SubtypeId></Id>
    <EnergyDensity>0.001556</EnergyDensity>
  </Gas>
</GasProperties>
</Definitions>
"""


def _mod_files():
    blocks = cube_blocks(
        block("ThrustDefinition", "Thrust", "PropLarge", "DisplayName_Mod_PropLarge", "Large",
              [("SteelPlate", 50)],
              "    <ThrusterType>Atmospheric</ThrusterType>\n"
              "    <ForceMagnitude>500000</ForceMagnitude>\n"
              "    <MaxPowerConsumption>2</MaxPowerConsumption>\n"
              "    <MinPowerConsumption>0.000002</MinPowerConsumption>\n"),
        block("CargoContainerDefinition", "CargoContainer", "ModCrate", "Mod Crate", "Large",
              [("SteelPlate", 10)]),
    )
    return {
        "Data/CubeBlocks.sbc": blocks,
        "Data/EntityComponents.sbc": entity_components(inventory_component("ModCrate", 1, 1, 1)),
        "Data/Localization/MyTexts.resx": resx(MOD_TEXTS),
        "Data/Localization/MyTexts.de.resx": resx({"DisplayName_Mod_PropLarge": "Propeller Gross"}),
    }


def _write(path: Path, content: str):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def generate_test_game_data(root: Path):
    """
    Write a fake Steam library under root.

    Returns:
        (se_directory, se_workshop_directory)
    """
    root = Path(root)
    se_dir = root / "steamapps" / "common" / "SpaceEngineers"
    workshop_dir = root / "steamapps" / "workshop" / "content" / "244850"
    data_dir = se_dir / "Content" / "Data"

    _write(data_dir / "Localization" / "MyTexts.resx", resx(SE_TEXTS))
    _write(data_dir / "Components.sbc", COMPONENTS)
    _write(data_dir / "GasProperties.sbc", GAS_PROPERTIES)
    _write(data_dir / "EntityComponents.sbc", entity_components(
        inventory_component("LargeBlockLargeContainer", 3, 3, 3),
        inventory_component("LargeBlockOreBin", 2, 2, 2, input_constraint=True),
        capacitor_component("LargeRailgun", 0.0333, 3.36),
    ))
    for name, content in _se_cube_blocks().items():
        _write(data_dir / "CubeBlocks" / name, content)
    # No definitions at all
    _write(data_dir / "CubeBlocks" / "CubeBlocks_Empty.sbc", XML_HEADER + "<Definitions />\n")
    # Not a CubeBlocks file, must not be read for blocks
    _write(data_dir / "Ammos.sbc", XML_HEADER + DEFINITIONS_OPEN + "<Ammos />\n</Definitions>\n")

    for name, content in _mod_files().items():
        _write(workshop_dir / str(MOD_ID) / name, content)

    return se_dir, workshop_dir


if __name__ == "__main__":
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("test_game_data")
    se, workshop = generate_test_game_data(target)
    print(f"Generated SE directory: {se}")
    print(f"Generated workshop directory: {workshop}")

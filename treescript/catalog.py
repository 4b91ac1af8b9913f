"""
Built-in API dump.

Covers the classes most scene trees are made of: parts, models, folders,
value objects, joints, humanoids, scripts, 2D GUI objects, the data model
and the common services. A fuller dump can be loaded from JSON with
MetadataService.from_json().
"""

from __future__ import annotations

from treescript.api import ApiDump, ClassDescriptor, PropertyDescriptor
from treescript.datatypes import (
    BrickColor,
    CFrame,
    Color3,
    EnumItem,
    UDim2,
    Vector2,
    Vector3,
)


def _prop(name, value_type, default=None, tags=(), security="None"):
    return PropertyDescriptor(
        name=name,
        value_type=value_type,
        default=default,
        tags=list(tags),
        security=security,
    )


def _class(name, superclass, properties=(), tags=()):
    return ClassDescriptor(
        name=name,
        superclass=superclass,
        properties=list(properties),
        tags=list(tags),
    )


DARK_STONE_GREY = Color3.from_rgb(27, 42, 53)

_TEXT_PROPERTIES = [
    _prop("Font", "Font", EnumItem("Font", "Legacy")),
    _prop("RichText", "bool", False),
    _prop("TextColor3", "Color3", DARK_STONE_GREY),
    _prop("TextColor", "BrickColor", BrickColor("Black"), tags=["Deprecated"]),
    _prop("TextScaled", "bool", False),
    _prop("TextSize", "float", 14.0),
    _prop("TextTransparency", "float", 0.0),
    _prop("TextWrapped", "bool", False),
    _prop("TextXAlignment", "TextXAlignment", EnumItem("TextXAlignment", "Center")),
    _prop("TextYAlignment", "TextYAlignment", EnumItem("TextYAlignment", "Center")),
    _prop("TextBounds", "Vector2", Vector2(), tags=["ReadOnly"]),
]

_IMAGE_PROPERTIES = [
    _prop("Image", "Content", ""),
    _prop("ImageColor3", "Color3", Color3(1, 1, 1)),
    _prop("ImageTransparency", "float", 0.0),
    _prop("ScaleType", "ScaleType", EnumItem("ScaleType", "Stretch")),
]

_BUTTON_PROPERTIES = [
    _prop("AutoButtonColor", "bool", True),
    _prop("Modal", "bool", False),
    _prop("Selected", "bool", False),
]


BUILTIN_DUMP = ApiDump(classes=[
    # -------------------------------------------------------------------------
    # Core
    # -------------------------------------------------------------------------
    _class("Instance", None, tags=["NotCreatable"], properties=[
        _prop("Name", "string", ""),
        _prop("ClassName", "string", "", tags=["ReadOnly"]),
        _prop("Parent", "Instance"),
        _prop("Archivable", "bool", True),
        _prop("archivable", "bool", True, tags=["Deprecated"]),
        _prop("RobloxLocked", "bool", False, security="PluginSecurity"),
        _prop("UniqueId", "UniqueId", "", tags=["NotScriptable"]),
        _prop("SourceAssetId", "int64", -1, security="RobloxScriptSecurity"),
    ]),
    _class("PVInstance", "Instance", tags=["NotCreatable"]),
    _class("ServiceProvider", "Instance", tags=["NotCreatable"]),
    _class("DataModel", "ServiceProvider", tags=["NotCreatable"], properties=[
        _prop("PlaceId", "int64", 0, tags=["ReadOnly"]),
        _prop("JobId", "string", "", tags=["ReadOnly"]),
    ]),
    _class("Folder", "Instance"),
    _class("Configuration", "Instance"),

    # -------------------------------------------------------------------------
    # 3D
    # -------------------------------------------------------------------------
    _class("BasePart", "PVInstance", tags=["NotCreatable"], properties=[
        _prop("Anchored", "bool", False),
        _prop("CanCollide", "bool", True),
        _prop("CanTouch", "bool", True),
        _prop("CastShadow", "bool", True),
        _prop("Locked", "bool", False),
        _prop("Massless", "bool", False),
        _prop("Transparency", "float", 0.0),
        _prop("Reflectance", "float", 0.0),
        _prop("Size", "Vector3", Vector3(4, 1, 2)),
        _prop("CFrame", "CFrame", CFrame()),
        _prop("Position", "Vector3", Vector3()),
        _prop("Rotation", "Vector3", Vector3()),
        _prop("Orientation", "Vector3", Vector3()),
        _prop("Color", "Color3", Color3.from_rgb(163, 162, 165)),
        _prop("BrickColor", "BrickColor", BrickColor("Medium stone grey")),
        _prop("brickColor", "BrickColor", BrickColor("Medium stone grey"), tags=["Deprecated"]),
        _prop("Material", "Material", EnumItem("Material", "Plastic")),
        _prop("Mass", "float", 0.0, tags=["ReadOnly"]),
        _prop("AssemblyLinearVelocity", "Vector3", Vector3()),
    ]),
    _class("FormFactorPart", "BasePart", tags=["NotCreatable"], properties=[
        _prop("FormFactor", "FormFactor", EnumItem("FormFactor", "Symmetric")),
        _prop("formFactor", "FormFactor", EnumItem("FormFactor", "Symmetric"), tags=["Deprecated"]),
    ]),
    _class("Part", "FormFactorPart", properties=[
        _prop("Shape", "PartType", EnumItem("PartType", "Block")),
    ]),
    _class("WedgePart", "FormFactorPart"),
    _class("Terrain", "BasePart", tags=["NotCreatable"], properties=[
        _prop("WaterColor", "Color3", Color3.from_rgb(12, 84, 92)),
    ]),
    _class("Model", "PVInstance", properties=[
        _prop("PrimaryPart", "Instance"),
    ]),
    _class("Workspace", "Model", tags=["Service", "NotCreatable"], properties=[
        _prop("Gravity", "float", 196.2),
        _prop("FallenPartsDestroyHeight", "float", -500.0),
        _prop("CurrentCamera", "Instance"),
    ]),
    _class("JointInstance", "Instance", tags=["NotCreatable"], properties=[
        _prop("Part0", "Instance"),
        _prop("Part1", "Instance"),
        _prop("C0", "CFrame", CFrame()),
        _prop("C1", "CFrame", CFrame()),
        _prop("Enabled", "bool", True),
    ]),
    _class("Weld", "JointInstance"),
    _class("Humanoid", "Instance", properties=[
        _prop("DisplayName", "string", ""),
        _prop("Health", "float", 100.0),
        _prop("MaxHealth", "float", 100.0),
        _prop("WalkSpeed", "float", 16.0),
        _prop("JumpPower", "float", 50.0),
        _prop("RigType", "HumanoidRigType", EnumItem("HumanoidRigType", "R6")),
        _prop("RootPart", "Instance", tags=["ReadOnly"]),
    ]),

    # -------------------------------------------------------------------------
    # Values
    # -------------------------------------------------------------------------
    _class("ValueBase", "Instance", tags=["NotCreatable"]),
    _class("ObjectValue", "ValueBase", properties=[_prop("Value", "Instance")]),
    _class("StringValue", "ValueBase", properties=[_prop("Value", "string", "")]),
    _class("NumberValue", "ValueBase", properties=[_prop("Value", "double", 0.0)]),
    _class("IntValue", "ValueBase", properties=[_prop("Value", "int64", 0)]),
    _class("BoolValue", "ValueBase", properties=[_prop("Value", "bool", False)]),

    # -------------------------------------------------------------------------
    # Scripts
    # -------------------------------------------------------------------------
    _class("LuaSourceContainer", "Instance", tags=["NotCreatable"]),
    _class("BaseScript", "LuaSourceContainer", tags=["NotCreatable"], properties=[
        _prop("Disabled", "bool", False),
    ]),
    _class("Script", "BaseScript", properties=[
        _prop("Source", "ProtectedString", "", security="PluginSecurity"),
    ]),
    _class("LocalScript", "Script"),
    _class("ModuleScript", "LuaSourceContainer", properties=[
        _prop("Source", "ProtectedString", "", security="PluginSecurity"),
    ]),

    # -------------------------------------------------------------------------
    # GUI
    # -------------------------------------------------------------------------
    _class("GuiBase2d", "Instance", tags=["NotCreatable"], properties=[
        _prop("AbsolutePosition", "Vector2", Vector2(), tags=["ReadOnly"]),
        _prop("AbsoluteSize", "Vector2", Vector2(), tags=["ReadOnly"]),
    ]),
    _class("LayerCollector", "GuiBase2d", tags=["NotCreatable"], properties=[
        _prop("Enabled", "bool", True),
        _prop("ResetOnSpawn", "bool", True),
    ]),
    _class("ScreenGui", "LayerCollector", properties=[
        _prop("DisplayOrder", "int", 0),
        _prop("IgnoreGuiInset", "bool", False),
    ]),
    _class("GuiObject", "GuiBase2d", tags=["NotCreatable"], properties=[
        _prop("Active", "bool", False),
        _prop("AnchorPoint", "Vector2", Vector2()),
        _prop("BackgroundColor3", "Color3", Color3(1, 1, 1)),
        _prop("BackgroundColor", "BrickColor", BrickColor("Institutional white"), tags=["Deprecated"]),
        _prop("BackgroundTransparency", "float", 0.0),
        _prop("BorderColor3", "Color3", DARK_STONE_GREY),
        _prop("BorderColor", "BrickColor", BrickColor("Really black"), tags=["Deprecated"]),
        _prop("BorderSizePixel", "int", 1),
        _prop("ClipsDescendants", "bool", False),
        _prop("LayoutOrder", "int", 0),
        _prop("NextSelectionDown", "Instance"),
        _prop("NextSelectionUp", "Instance"),
        _prop("Position", "UDim2", UDim2()),
        _prop("Rotation", "float", 0.0),
        _prop("Size", "UDim2", UDim2()),
        _prop("SizeConstraint", "SizeConstraint", EnumItem("SizeConstraint", "RelativeXY")),
        _prop("Transparency", "float", 0.0, tags=["Hidden"]),
        _prop("Visible", "bool", True),
        _prop("ZIndex", "int", 1),
    ]),
    _class("Frame", "GuiObject", properties=[
        _prop("Style", "FrameStyle", EnumItem("FrameStyle", "Custom")),
    ]),
    _class("ScrollingFrame", "GuiObject", properties=[
        _prop("CanvasPosition", "Vector2", Vector2()),
        _prop("CanvasSize", "UDim2", UDim2(0, 0, 2, 0)),
        _prop("ScrollBarThickness", "int", 12),
        _prop("ScrollingEnabled", "bool", True),
    ]),
    _class("GuiLabel", "GuiObject", tags=["NotCreatable"]),
    _class("TextLabel", "GuiLabel", properties=[
        _prop("Text", "string", "Label"),
        *_TEXT_PROPERTIES,
    ]),
    _class("ImageLabel", "GuiLabel", properties=_IMAGE_PROPERTIES),
    _class("GuiButton", "GuiObject", tags=["NotCreatable"], properties=_BUTTON_PROPERTIES),
    _class("TextButton", "GuiButton", properties=[
        _prop("Text", "string", "Button"),
        *_TEXT_PROPERTIES,
    ]),
    _class("ImageButton", "GuiButton", properties=_IMAGE_PROPERTIES),
    _class("TextBox", "GuiObject", properties=[
        _prop("Text", "string", "TextBox"),
        _prop("ClearTextOnFocus", "bool", True),
        _prop("MultiLine", "bool", False),
        _prop("PlaceholderText", "string", ""),
        *_TEXT_PROPERTIES,
    ]),

    # -------------------------------------------------------------------------
    # Services
    # -------------------------------------------------------------------------
    _class("ReplicatedStorage", "Instance", tags=["Service", "NotCreatable"]),
    _class("ServerStorage", "Instance", tags=["Service", "NotCreatable"]),
    _class("StarterGui", "Instance", tags=["Service", "NotCreatable"], properties=[
        _prop("ShowDevelopmentGui", "bool", True),
    ]),
    _class("Lighting", "Instance", tags=["Service", "NotCreatable"], properties=[
        _prop("Ambient", "Color3", Color3()),
        _prop("Brightness", "float", 2.0),
        _prop("ClockTime", "float", 14.0),
    ]),
    _class("Players", "Instance", tags=["Service", "NotCreatable"], properties=[
        _prop("MaxPlayers", "int", 12, tags=["ReadOnly"]),
    ]),
    _class("Player", "Instance", tags=["NotCreatable"], properties=[
        _prop("DisplayName", "string", ""),
    ]),
])

"""Unit tests for the pen node style-property builders."""

from __future__ import annotations

import pytest

from lcms_pages.pen import styles


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("$primary", "var(--primary)"),
        ("$--primary", "var(--primary)"),
        (12.0, "12"),
        (1.25, "1.25"),
        ("auto", "auto"),
        (None, ""),
    ],
)
def test_resolve_value(value: object, expected: str) -> None:
    assert styles.resolve_value(value) == expected


def test_variables_never_get_a_unit() -> None:
    assert styles.with_unit("$gap") == "var(--gap)"
    assert styles.with_unit(8) == "8px"
    assert styles.build_padding("$space") == ["padding: var(--space)"]
    assert styles.build_padding([8, "$x"]) == ["padding: 8px var(--x)"]


def test_hex_to_rgba() -> None:
    assert styles.hex_to_rgba("#ff000080") == "rgba(255, 0, 0, 0.502)"
    assert styles.hex_to_rgba("#00000000") == "rgba(0, 0, 0, 0)"
    assert styles.hex_to_rgba("#ffffffff") == "rgba(255, 255, 255, 1)"


@pytest.mark.parametrize(
    ("color", "expected"),
    [
        ("#abc", "#aabbcc"),
        ("#123456", "#123456"),
        ("#ff000080", "rgba(255, 0, 0, 0.502)"),
        ("$brand", "var(--brand)"),
        ("red", "red"),
    ],
)
def test_resolve_color(color: str, expected: str) -> None:
    assert styles.resolve_color(color) == expected


@pytest.mark.parametrize(("rotation", "expected"), [(0, "180"), (90, "90"), (180, "0"), (270, "270")])
def test_gradient_angle(rotation: int, expected: str) -> None:
    assert styles.gradient_angle(rotation) == expected


def test_linear_gradient_stops() -> None:
    fill = {
        "type": "gradient",
        "gradientType": "linear",
        "rotation": 90,
        "colors": [{"color": "#000", "position": 0}, {"color": "#ffffff80", "position": 0.505}],
    }
    assert styles.build_fill(fill) == [
        "background: linear-gradient(90deg, #000000 0%, rgba(255, 255, 255, 0.502) 51%)"
    ]


def test_radial_and_angular_gradients() -> None:
    colors = [{"color": "#111111"}, {"color": "#222222"}]
    radial = styles.build_gradient_value({"gradientType": "radial", "colors": colors})
    conic = styles.build_gradient_value({"gradientType": "angular", "colors": colors})
    assert radial == "radial-gradient(ellipse at center, #111111, #222222)"
    assert conic == "conic-gradient(#111111, #222222)"


def test_disabled_fill_is_ignored() -> None:
    assert styles.build_fill({"type": "color", "color": "#fff", "enabled": False}) == []


def test_fill_list_layers_images_and_colour() -> None:
    fills = [
        {"type": "color", "color": "#eeeeee"},
        {"type": "image", "url": "/bg.png", "mode": "fit"},
    ]
    assert styles.build_fill(fills) == [
        "background: url('/bg.png') center / contain no-repeat",
        "background-color: #eeeeee",
    ]


def test_image_fill() -> None:
    assert styles.build_fill({"type": "image", "url": "/hero.jpg", "mode": "stretch"}) == [
        "background-image: url('/hero.jpg')",
        "background-size: 100% 100%",
        "background-position: center",
        "background-repeat: no-repeat",
    ]


def test_uniform_and_dashed_stroke() -> None:
    assert styles.build_stroke({"thickness": 2, "fill": "#ff0000"}) == [
        "border: 2px solid #ff0000"
    ]
    assert styles.build_stroke({"thickness": 1, "dashPattern": [4, 2]}) == [
        "border: 1px dashed #000000"
    ]
    assert styles.build_stroke({"thickness": 0}) == []


def test_per_side_stroke() -> None:
    stroke = {"thickness": {"top": 0, "bottom": 3}, "fill": {"type": "color", "color": "#333"}}
    assert styles.build_stroke(stroke) == ["border-bottom: 3px solid #333333"]


def test_effects() -> None:
    effects = [
        {"type": "shadow", "offset": {"x": 0, "y": 2}, "blur": 8},
        {"type": "shadow", "shadowType": "inner", "color": "#ff0000"},
        {"type": "blur", "radius": 4},
        {"type": "background_blur", "radius": 10},
        {"type": "shadow", "enabled": False},
    ]
    assert styles.build_effects(effects) == [
        "box-shadow: 0px 2px 8px 0px rgba(0, 0, 0, 0.251), inset 0px 0px 0px 0px #ff0000",
        "filter: blur(4px)",
        "backdrop-filter: blur(10px)",
        "-webkit-backdrop-filter: blur(10px)",
    ]


def test_layout_declarations() -> None:
    node = {
        "layout": "vertical",
        "gap": 16,
        "padding": [8, 16, 8, 16],
        "justifyContent": "space_between",
        "alignItems": "center",
    }
    assert styles.build_layout(node) == [
        "display: flex",
        "flex-direction: column",
        "gap: 16px",
        "padding: 8px 16px 8px 16px",
        "justify-content: space-between",
        "align-items: center",
    ]
    assert styles.build_layout({"layout": "none"}) == ["position: relative"]


def test_typography() -> None:
    node = {
        "fontFamily": "Inter",
        "fontSize": 18,
        "fontWeight": "600",
        "lineHeight": 1.5,
        "underline": True,
        "strikethrough": True,
    }
    assert styles.build_typography(node) == [
        'font-family: "Inter", sans-serif',
        "font-size: 18px",
        "font-weight: 600",
        "line-height: 1.5",
        "text-decoration: underline line-through",
    ]
    assert styles.build_typography({"fontFamily": "$font"}) == ["font-family: var(--font)"]


def test_fill_container_on_main_and_cross_axis() -> None:
    assert styles.build_dimension("width", "fill_container", "horizontal") == [
        "flex: 1 1 0%",
        "min-width: 0",
    ]
    assert styles.build_dimension("width", "fill_container(240)", "horizontal") == [
        "flex: 1 1 240px",
        "min-width: 0",
    ]
    assert styles.build_dimension("width", "fill_container", "vertical") == ["width: 100%"]


def test_fit_content_and_numbers() -> None:
    assert styles.build_dimension("height", "fit_content(48)") == [
        "height: fit-content",
        "min-height: 48px",
    ]
    assert styles.build_dimension("height", 120) == ["height: 120px"]
    assert styles.build_dimension("height", "$h") == ["height: var(--h)"]
    assert styles.build_dimension("height", True) == []


def test_position() -> None:
    assert styles.build_position({"x": 10, "y": 20.5}) == [
        "position: absolute",
        "left: 10px",
        "top: 20.5px",
    ]


@pytest.mark.parametrize(
    ("rotation", "expected"),
    [
        (0, []),
        (90, ["transform: rotate(-90deg)"]),
        (-45.5, ["transform: rotate(45.5deg)"]),
        ("$spin", ["transform: rotate(calc(-1 * var(--spin)))"]),
        (None, []),
    ],
)
def test_rotation(rotation: object, expected: list[str]) -> None:
    assert styles.build_rotation(rotation) == expected


def test_corner_radius_opacity_and_clip() -> None:
    assert styles.build_corner_radius(0) == []
    assert styles.build_corner_radius(8) == ["border-radius: 8px"]
    assert styles.build_corner_radius([4, 4, 0, 0]) == ["border-radius: 4px 4px 0px 0px"]
    assert styles.build_opacity(1) == []
    assert styles.build_opacity(0.4) == ["opacity: 0.4"]
    assert styles.build_clip(True) == ["overflow: hidden"]  # noqa: FBT003
    assert styles.build_clip("yes") == []


def test_gradient_text_colour_uses_background_clip() -> None:
    fill = {"type": "gradient", "colors": [{"color": "#000000"}, {"color": "#ffffff"}]}
    assert styles.build_text_color(fill) == [
        "background: linear-gradient(180deg, #000000, #ffffff)",
        "-webkit-background-clip: text",
        "-webkit-text-fill-color: transparent",
        "background-clip: text",
    ]
    assert styles.build_text_color("#abc") == ["color: #aabbcc"]


def test_all_styles_adds_position_only_when_absolute() -> None:
    node = {"width": 100, "x": 5, "y": 5}
    assert styles.build_all_styles(node) == ["width: 100px"]
    assert styles.build_all_styles(node, absolute=True) == [
        "width: 100px",
        "position: absolute",
        "left: 5px",
        "top: 5px",
    ]

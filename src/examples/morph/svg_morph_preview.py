"""Reconciles a square and a triangle and writes a SVG file showing
the intermediate shapes of the morph side by side.
"""

import svgwrite

from avmorph.path_morpher import AvPathMorpher
from avmorph.svgpath import AvSvgPath

OUTPUT_FILE = "data/output/example/svg/morph_square_to_triangle.svg"

SQUARE = "M 0 0 L 100 0 L 100 100 L 0 100 Z"
TRIANGLE = "M 50 0 L 100 100 Q 50 120 0 100 Z"

NUM_FRAMES = 5  # number of shapes drawn, including both end shapes
FRAME_SPACING = 150  # horizontal distance between two shapes


def main(output_file: str = OUTPUT_FILE):
    """Reconciles both shapes, interpolates NUM_FRAMES steps
    and saves them next to each other into a SVG file.
    """
    from_path = AvSvgPath.from_path_string(SQUARE)
    to_path = AvSvgPath.from_path_string(TRIANGLE)

    result = AvPathMorpher.auto_fix(0, from_path, to_path)
    print(f"status:  {result.status.value}")
    print(f"from:    {AvSvgPath.to_path_string(result.from_path)}")
    print(f"to:      {AvSvgPath.to_path_string(result.to_path)}")

    dwg = svgwrite.Drawing(
        output_file,
        size=(f"{NUM_FRAMES * FRAME_SPACING}px", f"{FRAME_SPACING}px"),
        viewBox=f"-25 -25 {NUM_FRAMES * FRAME_SPACING} {FRAME_SPACING}",
    )
    for frame in range(NUM_FRAMES):
        fraction = frame / (NUM_FRAMES - 1)
        shape = result.from_path.interpolate(result.to_path, fraction)
        dwg.add(
            dwg.path(
                d=AvSvgPath.to_path_string(shape),
                transform=f"translate({frame * FRAME_SPACING} 0)",
                stroke="black",
                stroke_width=1,
                fill="none",
            )
        )

    dwg.saveas(output_file, pretty=True, indent=2)
    return result


if __name__ == "__main__":
    main()

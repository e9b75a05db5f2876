from app.modules.boards.schemas import BoardNode, BoardResponse, DevelopmentClass, Persona, UseCase
from app.modules.generation.prompt_compiler import (
    GENERATION_INSTRUCTIONS,
    build_generation_prompt,
    compile_master_prompt,
)


def node(level, title, objective=None):
    return BoardNode(data={"level": level, "title": title, "objective": objective})


def test_sections_appear_in_order():
    board = BoardResponse(id="B1", name="Shop", description="An online shop")
    nodes = [node(0, "Catalog", "browse products"), node(1, "Cart", "collect items")]
    prompt = compile_master_prompt(
        board,
        nodes,
        [DevelopmentClass(name="ProductService", description="CRUD for products")],
        [Persona(name="Buyer", description="buys things")],
        [UseCase(title="Checkout", steps=[{"action": "open cart"}, {"action": "pay"}])],
    )
    headings = [
        "# Master Prompt - Application: Shop",
        "## Project Description",
        "## Main Objectives",
        "## Personas",
        "## Main Use Cases",
        "## Architecture Components",
        "## Key Features",
    ]
    positions = [prompt.index(h) for h in headings]
    assert positions == sorted(positions)
    assert "- browse products" in prompt
    assert "**Buyer**: buys things" in prompt
    assert "Steps: open cart → pay" in prompt
    assert "**ProductService**: CRUD for products" in prompt
    assert "- [L1] Cart: collect items" in prompt


def test_optional_sections_are_omitted():
    board = BoardResponse(id="B1", name="Shop")
    prompt = compile_master_prompt(board, [node(0, "Catalog", "browse")], [], [], [])
    assert "## Project Description" not in prompt
    assert "## Personas" not in prompt
    assert "## Main Use Cases" not in prompt
    assert "## Architecture Components" not in prompt


def test_fallback_objective_when_no_top_level_nodes():
    board = BoardResponse(id="B1", name="Shop")
    prompt = compile_master_prompt(board, [node(2, "Deep detail")], [], [], [])
    assert "- Build a working web application based on the project Shop" in prompt


def test_objective_falls_back_to_title():
    board = BoardResponse(id="B1", name="Shop")
    prompt = compile_master_prompt(board, [node(0, "Catalog")], [], [], [])
    assert "## Main Objectives\n\n- Catalog\n" in prompt


def test_caps_and_insertion_order():
    board = BoardResponse(id="B1", name="Big")
    nodes = [node(i % 3, f"Feature {i}", f"goal {i}") for i in range(20)]
    personas = [Persona(name=f"P{i}") for i in range(5)]
    use_cases = [UseCase(title=f"UC{i}") for i in range(5)]
    classes = [DevelopmentClass(name=f"C{i}") for i in range(8)]

    prompt = compile_master_prompt(board, nodes, classes, personas, use_cases)

    assert [f"**P{i}**" in prompt for i in range(5)] == [True, True, True, False, False]
    assert [f"### UC{i}" in prompt for i in range(5)] == [True, True, True, False, False]
    assert sum(f"**C{i}**" in prompt for i in range(8)) == 5
    features = prompt.split("## Key Features")[1]
    listed = [line for line in features.splitlines() if line.startswith("- [L")]
    assert len(listed) == 10
    assert all("[L2]" not in line for line in listed)
    assert listed[0] == "- [L0] Feature 0: goal 0"
    assert listed[1] == "- [L1] Feature 1: goal 1"
    assert "**P0**: N/A" in prompt


def test_missing_level_counts_as_top_feature_but_not_objective():
    board = BoardResponse(id="B1", name="Shop")
    prompt = compile_master_prompt(board, [BoardNode(data={"title": "Untiered"})], [], [], [])
    assert "- Build a working web application based on the project Shop" in prompt
    assert "- [L0] Untiered: " in prompt


def test_generation_prompt_appends_instructions():
    prompt = build_generation_prompt("# Master Prompt")
    assert prompt.startswith("# Master Prompt")
    assert prompt.endswith(GENERATION_INSTRUCTIONS)


def test_null_related_fields_render_as_placeholders():
    prompt = compile_master_prompt(
        BoardResponse(id="B1", name="Shop"),
        [BoardNode(data=None)],
        [DevelopmentClass(name=None)],
        [Persona(name=None, description="buys things")],
        [UseCase(title=None, steps=[{"action": None}, {"action": "pay"}])],
    )

    assert "**N/A**: buys things" in prompt
    assert "### N/A" in prompt
    assert "Steps:  → pay" in prompt
    assert "**N/A**: N/A" in prompt
    assert "- [L0] N/A: " in prompt

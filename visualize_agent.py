import sys
import os

# Add the current directory to sys.path to ensure we can import the module
sys.path.append(os.getcwd())

from agents.brand_workflow_agent.graph import get_brand_workflow_graph
from agents.site_scan_agent.graph import get_site_scan_graph

GRAPHS = {
    "multi_call": get_brand_workflow_graph,
    "single_call": get_site_scan_graph,
}


def main():
    strategy = sys.argv[1] if len(sys.argv) > 1 else "multi_call"
    if strategy not in GRAPHS:
        print(f"Unknown strategy {strategy!r}; choose one of: {', '.join(GRAPHS)}")
        sys.exit(1)

    print(f"Generating {strategy} graph visualization...")
    graph = GRAPHS[strategy]()

    try:
        # Note: This might require internet access to hit the mermaid.ink API
        png_bytes = graph.get_graph().draw_mermaid_png()

        output_file = f"{strategy}_graph.png"
        with open(output_file, "wb") as f:
            f.write(png_bytes)

        print(f"Success! Graph visualization saved to {output_file}")

    except Exception as e:
        print(f"Error generating PNG: {e}")
        print("\nFalling back to Mermaid syntax. You can paste this into https://mermaid.live/ :\n")
        print(graph.get_graph().draw_mermaid())


if __name__ == "__main__":
    main()

"""CT Geometry Planner — Entry Point."""
from ctplanner.application import main


if __name__ == "__main__":
    main()

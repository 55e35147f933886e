import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from models import init_db

if __name__ == "__main__":
    print("Creating cigar record tables...")
    init_db()
    print("Database tables created.")

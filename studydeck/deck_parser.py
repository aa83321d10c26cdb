import pandas as pd
from typing import List, Dict, Any
from pathlib import Path

from studydeck.errors import DeckImportError

# Alternative headers used by common flashcard exports (Anki, Quizlet)
COLUMN_ALIASES = {
    "front": "question",
    "term": "question",
    "prompt": "question",
    "back": "answer",
    "definition": "answer",
    "response": "answer",
    "clue": "hint",
}

class DeckParser:
    """
    Parse flashcard tables exported from spreadsheets.
    Expected columns: Question, Answer, optional Hint.
    """

    @staticmethod
    def parse_csv_table(file_path: str) -> List[Dict[str, Any]]:
        """Parse CSV format flashcard table"""
        try:
            df = pd.read_csv(file_path)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise DeckImportError(f"Could not read CSV file {file_path}: {e}") from e
        return DeckParser._rows_to_cards(df)

    @staticmethod
    def parse_excel_table(file_path: str) -> List[Dict[str, Any]]:
        """Parse Excel format flashcard table (first sheet)"""
        try:
            df = pd.read_excel(file_path)
        except ValueError as e:
            raise DeckImportError(f"Could not read Excel file {file_path}: {e}") from e
        return DeckParser._rows_to_cards(df)

    @staticmethod
    def _rows_to_cards(df: pd.DataFrame) -> List[Dict[str, Any]]:
        # Normalize column names
        df.columns = df.columns.astype(str).str.strip().str.lower()
        # Only the first alias found for each target is used; later ones are ignored
        renames = {}
        for alias, target in COLUMN_ALIASES.items():
            if alias in df.columns and target not in df.columns and target not in renames.values():
                renames[alias] = target
        df = df.rename(columns=renames)

        if df.columns.duplicated().any():
            duplicates = sorted(set(df.columns[df.columns.duplicated()]))
            raise DeckImportError(f"Duplicate columns: {', '.join(duplicates)}")

        if "question" not in df.columns or "answer" not in df.columns:
            raise DeckImportError(
                f"Missing question/answer columns. Found: {', '.join(df.columns)}"
            )

        cards = []
        for _, row in df.iterrows():
            question = DeckParser._cell(row.get("question"))
            answer = DeckParser._cell(row.get("answer"))

            # Skip rows with missing essential data or nan values
            if not question or not answer:
                continue

            cards.append({
                "question": question,
                "answer": answer,
                "hint": DeckParser._cell(row.get("hint")) if "hint" in df.columns else None,
            })

        return cards

    @staticmethod
    def _cell(value: Any):
        if value is None or pd.isna(value):
            return None
        text = str(value).strip()
        return text or None

    @staticmethod
    def auto_parse(file_path: str) -> List[Dict[str, Any]]:
        """
        Automatically detect file type and parse accordingly.
        Supports: CSV, Excel (xlsx, xls)
        """
        path = Path(file_path)
        if not path.is_file():
            raise DeckImportError(f"File not found: {file_path}")
        file_ext = path.suffix.lower()

        if file_ext == ".csv":
            return DeckParser.parse_csv_table(file_path)
        elif file_ext in [".xlsx", ".xls"]:
            return DeckParser.parse_excel_table(file_path)
        else:
            raise DeckImportError(f"Unsupported file format: {file_ext}. Use .csv or .xlsx")

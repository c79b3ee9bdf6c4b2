"""DOCX document generator for history item export."""

import re
from datetime import datetime
from pathlib import Path

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt, RGBColor

from studyverse.models.study import HistoryItem, QuizItem, QuizQuestion

_HEADING = re.compile(r"^(#{1,6})\s+(.*)$")
_BULLET = re.compile(r"^\s*[-*+]\s+(.*)$")
_NUMBERED = re.compile(r"^\s*\d+[.)]\s+(.*)$")
_EMPHASIS = re.compile(r"(\*\*|__|\*|_|`)")


def ensure_output_directory(output_dir: str = "output") -> Path:
    """
    Ensure the output directory exists.

    Args:
        output_dir: Directory path to create

    Returns:
        Path object for the output directory
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    return output_path


def generate_timestamped_filename(base_name: str, extension: str = "docx") -> str:
    """
    Generate a filename with timestamp.

    Args:
        base_name: Base name for the file
        extension: File extension (without dot)

    Returns:
        Filename with timestamp
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    # Clean the base name to remove any path components
    base_name = Path(base_name).name
    return f"{base_name}_{timestamp}.{extension}"


def slugify(text: str) -> str:
    """File-name friendly version of a title."""
    slug = re.sub(r"[^A-Za-z0-9]+", "_", text).strip("_").lower()
    return slug or "artifact"


def export_history_item(
    item: HistoryItem,
    output_path: str | None = None,
    include_answers: bool = True,
    use_output_dir: bool = True,
    output_dir: str = "output",
) -> str:
    """
    Export a stored artifact to a formatted DOCX file.

    Args:
        item: History item to export
        output_path: Target path; defaults to a name built from the title
        include_answers: For quizzes, include the answer key and explanations
        use_output_dir: If True, saves to output directory with timestamp
        output_dir: Directory to save files in (default: "output")

    Returns:
        Path to the created DOCX file
    """
    if output_path is None:
        output_path = f"{slugify(item.title)}_{item.type.value.lower()}"

    if use_output_dir:
        output_dir_path = ensure_output_directory(output_dir)
        base_name = Path(output_path).stem
        output_path = str(output_dir_path / generate_timestamped_filename(base_name))

    doc = Document()
    setup_document_styles(doc)
    add_title_block(doc, item)

    if isinstance(item, QuizItem):
        add_quiz_to_document(doc, item.content, include_answers)
        if include_answers:
            add_answer_key(doc, item.content)
    elif isinstance(item.content, str):
        add_markdown_to_document(doc, item.content)
    else:
        for message in item.content:
            para = doc.add_paragraph()
            para.add_run(f"{message.role.capitalize()}: ").bold = True
            para.add_run(message.text)

    doc.save(output_path)
    return output_path


def setup_document_styles(doc: Document) -> None:
    """
    Set up document-wide styles.

    Args:
        doc: Document to configure
    """
    style = doc.styles["Normal"]
    font = style.font
    font.name = "Calibri"
    font.size = Pt(11)

    for section in doc.sections:
        section.top_margin = Inches(1)
        section.bottom_margin = Inches(1)
        section.left_margin = Inches(1)
        section.right_margin = Inches(1)


def add_title_block(doc: Document, item: HistoryItem) -> None:
    """Title, subtitle, artifact kind and creation date."""
    title = doc.add_heading(item.title, level=0)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER

    subtitle_para = doc.add_paragraph(item.subtitle)
    subtitle_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    subtitle_para.runs[0].italic = True

    info_para = doc.add_paragraph()
    info_para.add_run(item.type.value).bold = True
    if isinstance(item, QuizItem):
        info_para.add_run("  |  ")
        info_para.add_run(f"Questions: {len(item.content)}").bold = True
        if item.score is not None:
            info_para.add_run("  |  ")
            info_para.add_run(f"Score: {item.score}/{len(item.content)}").bold = True
    info_para.alignment = WD_ALIGN_PARAGRAPH.CENTER

    date_para = doc.add_paragraph(f"Generated: {item.created_at.strftime('%Y-%m-%d %H:%M')}")
    date_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    date_para.runs[0].font.size = Pt(9)
    date_para.runs[0].font.color.rgb = RGBColor(128, 128, 128)

    doc.add_paragraph()


def strip_inline_markdown(text: str) -> str:
    return _EMPHASIS.sub("", text).strip()


def add_markdown_to_document(doc: Document, text: str) -> None:
    """
    Add summary or essay text, mapping markdown headings and lists to Word styles.

    Args:
        doc: Document to add to
        text: Markdown produced by the content writer
    """
    for line in text.splitlines():
        if not line.strip():
            continue

        heading = _HEADING.match(line)
        if heading:
            level = min(len(heading.group(1)), 4)
            doc.add_heading(strip_inline_markdown(heading.group(2)), level=level)
            continue

        bullet = _BULLET.match(line)
        if bullet:
            doc.add_paragraph(strip_inline_markdown(bullet.group(1)), style="List Bullet")
            continue

        numbered = _NUMBERED.match(line)
        if numbered:
            doc.add_paragraph(strip_inline_markdown(numbered.group(1)), style="List Number")
            continue

        doc.add_paragraph(strip_inline_markdown(line))


def option_label(index: int) -> str:
    return chr(ord("A") + index)


def add_quiz_to_document(
    doc: Document, questions: list[QuizQuestion], include_answers: bool = False
) -> None:
    """
    Add the quiz questions to the document.

    Args:
        doc: Document to add to
        questions: Questions in quiz order
        include_answers: If True, highlights answers and adds explanations
    """
    for i, question in enumerate(questions, 1):
        q_para = doc.add_paragraph()
        q_run = q_para.add_run(f"Q{i}. ")
        q_run.bold = True
        q_run.font.size = Pt(12)
        q_para.add_run(question.question)

        for index, option in enumerate(question.options):
            opt_para = doc.add_paragraph(f"   {option_label(index)}. {option}")
            opt_para.paragraph_format.left_indent = Inches(0.5)

            if include_answers and index == question.correct_answer_index:
                opt_para.runs[0].bold = True
                opt_para.runs[0].font.color.rgb = RGBColor(0, 128, 0)
                opt_para.add_run(" ✓").font.color.rgb = RGBColor(0, 128, 0)

        if include_answers and question.explanation:
            exp_para = doc.add_paragraph()
            exp_para.paragraph_format.left_indent = Inches(0.5)
            exp_run = exp_para.add_run(f"Explanation: {question.explanation}")
            exp_run.italic = True
            exp_run.font.size = Pt(10)
            exp_run.font.color.rgb = RGBColor(64, 64, 64)

        doc.add_paragraph()


def add_answer_key(doc: Document, questions: list[QuizQuestion]) -> None:
    """
    Add an answer key section at the end of the document.

    Args:
        doc: Document to add to
        questions: Questions in quiz order
    """
    doc.add_page_break()

    header = doc.add_heading("Answer Key", level=1)
    header.alignment = WD_ALIGN_PARAGRAPH.CENTER
    header.runs[0].font.color.rgb = RGBColor(0, 51, 102)

    table = doc.add_table(rows=1, cols=3)
    table.style = "Light Grid Accent 1"

    header_cells = table.rows[0].cells
    header_cells[0].text = "Q#"
    header_cells[1].text = "Answer"
    header_cells[2].text = "Explanation"

    for cell in header_cells:
        for paragraph in cell.paragraphs:
            for run in paragraph.runs:
                run.bold = True

    for i, question in enumerate(questions, 1):
        row_cells = table.add_row().cells
        row_cells[0].text = str(i)
        row_cells[1].text = (
            f"{option_label(question.correct_answer_index)} - {question.correct_option}"
        )
        row_cells[2].text = question.explanation or "N/A"

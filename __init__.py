"""
Notion to Anki
==============
Reads an HTML page export (e.g. from Notion), turns every toggle into a
flashcard and every linked subpage into a subdeck, and writes a single
.apkg package ready for Anki's File → Import.

Code spans become cloze deletions, bold text can become typed-answer
fields, and strikethrough text becomes tags.
"""

__version__ = "1.0.0"

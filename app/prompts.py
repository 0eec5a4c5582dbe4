"""
Prompt templates sent to the summarizer.
"""

FILE_SUMMARY_PROMPT = """Analyze the following data from an Excel/CSV file. Provide a concise summary of key insights, trends, and any notable observations. If it's a medicine booklet, highlight expiry dates, quantities, and suggest any immediate actions.

File Name: {filename}
File Content:
{content}... (truncated for brevity if very large)"""


def build_file_summary_prompt(filename: str, content: str) -> str:
    return FILE_SUMMARY_PROMPT.format(filename=filename, content=content)

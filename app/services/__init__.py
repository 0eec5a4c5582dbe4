"""
Excel Analytics Services Package

Core Services:
- upload_service: store, decode and upsert uploaded spreadsheets
- analysis_service: LLM summary of the most recent upload
- admin_service: cascading user deletion
- llm_service & llm_interface: multi-provider LLM abstraction and management
- realtime & process_callback: per-user progress events over WebSockets
- spreadsheet_codec & file_storage: workbook/CSV decoding and on-disk bytes
- history_service: best-effort audit log
"""

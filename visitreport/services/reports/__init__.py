"""
Visit report rendering: HTML, spreadsheet and WhatsApp text
"""

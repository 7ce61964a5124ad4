"""Audio capture.

- device_manager: input device lookup and mono config resolution
- conversion: native samples to int16 chunks
- capture: live microphone stream feeding the transfer channel
- file_source: WAV file replay through the same channel
"""

#%%
import time

import dlpc900ctl
from dlpc900ctl import DisplayMode, PatternRecord

#%% test reading some properties
dlp = dlpc900ctl.DeviceController(debug=1)
print(dlp.query_firmware_version().describe())
print(dlp.query_main_status())
print(dlpc900ctl.status.format_status_bits(dlp.query_hardware_status()))

#%% setup video mode, routes DisplayPort through the receiver
dlp.set_display_mode(DisplayMode.VIDEO)
time.sleep(4)
print(f"source locked: {dlp.query_main_status()['external_source_locked'].label}")

#%% Video-pattern setup
dlp.set_display_mode(DisplayMode.VIDEO_PATTERN)
dlp.define_pattern(PatternRecord.build(pattern_index=0, exposure_us=15000, dark_time_us=0, bitdepth=8, bit_position=0))
dlp.configure_pattern_count(1, 0)
dlp.start_pattern()

#%% Go to sleep
dlp.sleep()

#%% Wakeup!
dlp.wakeup()
dlp.set_display_mode(DisplayMode.VIDEO)

#%% release the DMD, shuts the receiver down again
dlp.close()

import os, sys, time
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')
from PyQt5 import QtGui
from keeper.animation import AnimationController, Phase
from keeper.parameters import EngineOptions
from keeper.pattern import generate_pattern

app = QtGui.QGuiApplication(sys.argv[:1])
text = ' '.join(sys.argv[1:]) or 'I am at peace'

# All features on, evolving geometry
options = EngineOptions(fold_4d=True, style='evolving')
controller = AnimationController(400, 400, options=options)
pattern = generate_pattern(text)
controller.start(pattern, run_timer=False)

frame_times = []
for frame in range(300):
    started = time.perf_counter()
    controller.tick()
    frame_times.append((time.perf_counter() - started) * 1000.0)

print('Digest:', pattern.hex)
print('Bundle:', pattern.params)
print('Frames rendered:', len(frame_times))
print('Mean frame time (ms): %.2f' % (sum(frame_times) / len(frame_times)))
print('Slowest frame (ms): %.2f' % max(frame_times))

controller.dissolve(run_timer=False)
controller.finish_dissolve()
print('Phase after dissolve:', controller.phase.value)
print('Surface black?', controller.surface.is_uniform_black())
assert controller.phase is Phase.IDLE

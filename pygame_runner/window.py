import pygame

COLS=0
ROWS=1

class TextWindow(object):
    def __init__(self,name, screen, font,
                    position, size,
                     foreground_color, background_color,
                     margin_top=5,margin_left=5):
        """ Position and size are in characters. Holds a block of lines, clipped to the window """
        self.screen = screen
        self.name = name
        self.position = position
        self.size = size
        self.font = font
        self.foreground_color = foreground_color
        self.background_color = background_color
        self.margin_top = margin_top
        self.margin_left = margin_left

        self.lines = []

        # Assume a monospace font and use 0 as the placeholder
        self.text_width,self.text_height = self.font.size("0" * self.size[COLS])
        self.text_width /= self.size[COLS] # Average size

        self.bounds = pygame.Rect(margin_left + (self.text_width*self.position[0]),
                                  margin_top + (self.text_height*self.position[1]),
                                  (self.text_width*self.size[COLS]),
                                  (self.text_height*self.size[ROWS]))

    def set_lines(self,lines):
        self.lines = [line[0:self.size[COLS]] for line in lines[0:self.size[ROWS]]]

    def _get_x_y_from_pos(self, col,row):
        """ Given a column and row, return the x/y location """
        return (self.margin_left+(self.text_width*col),
                self.margin_top+(self.text_height*row))

    def draw(self):
        """ Call to draw this text window to the ui window """
        pygame.draw.rect(self.screen, self.background_color, self.bounds)
        for idx,line in enumerate(self.lines):
            text = self.font.render(line, True, self.foreground_color)
            x,y = self._get_x_y_from_pos(self.position[0], self.position[1]+idx)
            self.screen.blit(text,(x,y))
